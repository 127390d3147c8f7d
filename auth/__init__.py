"""OAuth 2.0 sign-in helpers for the NetSuite client."""
