"""
token_exchange.py

Purpose:
- Build the NetSuite OAuth consent URL
- Exchange an authorization code (or a refresh token) for access + refresh tokens
- Used by NetSuiteClient for sign-in and token renewal
"""

import base64
import secrets
import time
import urllib.parse

import requests

from debug_log import _log, debug, debug_response
from netsuite_errors import AuthExchangeError

AUTHORIZATION_CODE = "authorization_code"
REFRESH_TOKEN = "refresh_token"


def basic_auth_header(client_id: str, client_secret: str) -> str:
    raw = f"{client_id}:{client_secret}".encode("utf-8")
    encoded = base64.b64encode(raw).decode("utf-8")
    return f"Basic {encoded}"


def new_state() -> str:
    return secrets.token_hex(16)


def build_authorization_url(
    auth_url: str, client_id: str, redirect_uri: str, scopes: str, state: str
) -> str:
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": scopes,
        "state": state,
    }
    return f"{auth_url}?" + urllib.parse.urlencode(params)


def build_token_request_body(
    token: str, grant_type: str = AUTHORIZATION_CODE, redirect_uri: str | None = None
) -> dict:
    """
    Build the form-encoded body for the NetSuite OAuth token exchange.
    Only the authorization_code grant carries the redirect_uri.
    """
    if grant_type == AUTHORIZATION_CODE:
        return {
            "grant_type": AUTHORIZATION_CODE,
            "redirect_uri": redirect_uri,
            "code": token,
        }
    if grant_type == REFRESH_TOKEN:
        return {
            "grant_type": REFRESH_TOKEN,
            "refresh_token": token,
        }
    raise ValueError(f"Unsupported grant_type: {grant_type}")


def _error_message(body: dict) -> str:
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if body.get("error_description"):
        return body["error_description"]
    if isinstance(error, str) and error:
        return error
    return "Error in get authorization token"


def exchange_token(
    session: requests.Session,
    token_url: str,
    client_id: str,
    client_secret: str,
    token: str,
    grant_type: str = AUTHORIZATION_CODE,
    redirect_uri: str | None = None,
    timeout: float = 30,
    debug_enabled: bool = False,
) -> dict:
    """
    Sends the token exchange request to NetSuite and returns the JSON response.
    An `error` field in the body fails the exchange whatever the HTTP status.
    """
    body = build_token_request_body(token, grant_type, redirect_uri)
    headers = {
        "Authorization": basic_auth_header(client_id, client_secret),
        "Content-Type": "application/x-www-form-urlencoded",
        "Accept": "application/json",
    }

    t0 = time.perf_counter()
    try:
        resp = session.post(token_url, data=body, headers=headers, timeout=timeout)
        _log(f"[TIMING] token request ({grant_type}) took {(time.perf_counter() - t0):.2f}s status={resp.status_code}")
        debug_response(debug_enabled, "RequestAuthorizationToken", resp)
        result = resp.json()
    except (requests.RequestException, ValueError) as exc:
        debug(debug_enabled, "RequestAuthorizationToken", repr(exc))
        raise AuthExchangeError(f"Cannot obtain token via {grant_type}") from exc

    if not isinstance(result, dict):
        raise AuthExchangeError(f"Cannot obtain token via {grant_type}")

    if "error" in result:
        # Never log the secret or the code, only what NetSuite answered
        _log(f"TOKEN BODY: {result}")
        raise AuthExchangeError(_error_message(result))

    if not result.get("access_token"):
        raise AuthExchangeError(f"Cannot obtain token via {grant_type}")

    return result


def extract_authorization_code(raw: str, expected_state: str | None = None) -> str:
    """
    Accept either the bare code or the whole redirect URL pasted by the operator.
    When the URL carries a state, it must match the one we generated.
    """
    value = (raw or "").strip()
    if "code=" in value:
        query = urllib.parse.urlparse(value).query or value.split("?", 1)[-1]
        params = urllib.parse.parse_qs(query)
        state = params.get("state", [None])[0]
        if expected_state and state is not None and state != expected_state:
            raise AuthExchangeError("Authorization state mismatch, please sign in again")
        value = (params.get("code", [""])[0] or "").strip()
    if not value:
        raise AuthExchangeError("Missing authorization code")
    return value
