"""
errors.py

Exceptions raised by the NetSuite REST client.
Every error the client raises derives from NetSuiteError so callers
can catch the whole family at once.
"""


class NetSuiteError(Exception):
    """Base class for all NetSuite client errors."""


class ConfigurationError(NetSuiteError):
    """A required setting (credential, RESTlet script id) is missing."""


class AuthExchangeError(NetSuiteError):
    """The token endpoint refused or failed an authorization/refresh exchange."""


class AuthenticationError(NetSuiteError):
    """The request was still unauthorized after refreshing the token."""


class RequestError(NetSuiteError):
    def __init__(self, method: str, url: str, message: str | None = None) -> None:
        self.method = method
        self.url = url
        super().__init__(message or f"Error in request [{method}]: {url}")


class MaxRetriesError(NetSuiteError):
    def __init__(self, method: str, url: str) -> None:
        self.method = method
        self.url = url
        super().__init__(f"Max retries error in request [{method}]: {url}")


class DownloadError(NetSuiteError):
    pass


class UploadError(NetSuiteError):
    pass
