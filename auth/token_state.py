"""
token_state.py

In-memory OAuth token state for one NetSuite client.
Nothing here is persisted: tokens live as long as the process.
"""

from dataclasses import dataclass

from debug_log import announce


@dataclass
class TokenState:
    access_token: str | None = None
    refresh_token: str | None = None
    pending_state: str | None = None  # CSRF nonce of the authorization in flight
    pending_code: str | None = None

    def reset(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.pending_state = None
        self.pending_code = None

    def apply(self, pair: dict, log_token: bool = False) -> None:
        """
        Store the token pair returned by the token endpoint.
        NetSuite may omit refresh_token on a refresh grant; keep the old one then.
        """
        self.access_token = pair.get("access_token")
        self.refresh_token = pair.get("refresh_token") or self.refresh_token
        if log_token:
            announce(f"🔑 NetSuite Access Token: {self.access_token}\n")
