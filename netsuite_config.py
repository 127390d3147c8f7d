"""
config.py

Settings for the NetSuite REST client.
Values come from the process environment, optionally seeded from a .env file.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from netsuite_errors import ConfigurationError

DEFAULT_REDIRECT_URI = "https://login.live.com/oauth20_desktop.srf"
DEFAULT_SCOPES = "rest_webservices"

AUTH_URL = "https://{host}.app.netsuite.com/app/login/oauth2/authorize.nl"
API_URL = "https://{host}.suitetalk.api.netsuite.com/services/rest"
RESTLET_URL = "https://{host}.restlets.api.netsuite.com/app/site/hosting/restlet.nl"

MAX_RETRIES = 3

_TRUTHY = ("1", "true", "yes", "on")


def env_flag(name: str) -> bool:
    return (os.getenv(name) or "").strip().lower() in _TRUTHY


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def account_host(account_id: str) -> str:
    # NetSuite host format: 3392496_SB2 -> 3392496-sb2
    return account_id.strip().lower().replace("_", "-")


@dataclass(frozen=True)
class NetSuiteSettings:
    account_id: str
    client_id: str
    client_secret: str
    access_token: str | None = None
    refresh_token: str | None = None
    script_id: str | None = None
    deploy_id: str = "1"
    redirect_uri: str = DEFAULT_REDIRECT_URI
    scopes: str = DEFAULT_SCOPES
    debug: bool = False
    log_token: bool = False
    timeout: float = 120.0
    token_timeout: float = 30.0
    retry_delay: float = 0.0

    def validate(self) -> None:
        if not self.account_id:
            raise ConfigurationError("The NetSuite Account ID is required!")
        if not self.client_id:
            raise ConfigurationError("The NetSuite APP ClientID is required!")
        if not self.client_secret:
            raise ConfigurationError("The NetSuite APP ClientSecret is required!")

    @property
    def host(self) -> str:
        return account_host(self.account_id)

    @property
    def api_url(self) -> str:
        return API_URL.format(host=self.host)

    @property
    def auth_url(self) -> str:
        return AUTH_URL.format(host=self.host)

    @property
    def token_url(self) -> str:
        return f"{self.api_url}/auth/oauth2/v1/token"

    @property
    def restlet_url(self) -> str:
        return RESTLET_URL.format(host=self.host)


def load_settings() -> NetSuiteSettings:
    """
    Build settings from .env / environment.
    Missing credentials are reported when the client is constructed,
    so this only reads and converts values.
    """
    load_dotenv()

    return NetSuiteSettings(
        account_id=os.getenv("NETSUITE_ACCOUNT_ID") or "",
        client_id=os.getenv("NETSUITE_CLIENT_ID") or "",
        client_secret=os.getenv("NETSUITE_CLIENT_SECRET") or "",
        access_token=os.getenv("NETSUITE_ACCESS_TOKEN") or None,
        refresh_token=os.getenv("NETSUITE_REFRESH_TOKEN") or None,
        script_id=os.getenv("NETSUITE_SCRIPT_ID") or None,
        deploy_id=os.getenv("NETSUITE_DEPLOY_ID") or "1",
        redirect_uri=os.getenv("NETSUITE_REDIRECT_URI") or DEFAULT_REDIRECT_URI,
        scopes=os.getenv("NETSUITE_SCOPES") or DEFAULT_SCOPES,
        debug=env_flag("NETSUITE_DEBUG"),
        log_token=env_flag("NETSUITE_LOG_TOKEN"),
        timeout=env_float("NETSUITE_TIMEOUT", 120.0),
        token_timeout=env_float("NETSUITE_TOKEN_TIMEOUT", 30.0),
        retry_delay=env_float("NETSUITE_RETRY_DELAY", 0.0),
    )
