import dataclasses
import threading
import time
import urllib.parse
from pathlib import Path
from typing import Any, Callable

import requests

from auth.token_exchange import (
    AUTHORIZATION_CODE,
    REFRESH_TOKEN,
    build_authorization_url,
    exchange_token as request_token_pair,
    extract_authorization_code,
    new_state,
)
from auth.token_state import TokenState
from netsuite_config import MAX_RETRIES, NetSuiteSettings, load_settings
from debug_log import _log, announce, debug, debug_response
from netsuite_errors import (
    AuthenticationError,
    AuthExchangeError,
    ConfigurationError,
    DownloadError,
    MaxRetriesError,
    NetSuiteError,
    RequestError,
    UploadError,
)
from file_transfer import decode_content, file_exists, resolve_destination, restlet_url, write_file
from normalize_utils import normalize

# Known flaky NetSuite condition: the call is treated as an empty success
TRANSIENT_PAYLOAD_ERROR = "IO error during request payload read"


class NetSuiteClient:
    """
    Reusable NetSuite REST client that:
    - Signs in with the OAuth 2.0 authorization code flow (or a pre-supplied token)
    - Refreshes the access token once when a request gets a 401, then replays it
    - Retries every logical call up to MAX_RETRIES times
    - Downloads/uploads File Cabinet files through a RESTlet
    - Logs timings/errors to a file (NO stdout prints -> safer for MCP stdio)
    - Reuses HTTP connections via requests.Session

    Example:
        client = NetSuiteClient(settings)
        client.sign_in()
        invoices = client.request_get("/record/v1/invoice")
        client.download_file(524171, "./downloads")
        client.logout()
    """

    def __init__(
        self,
        settings: NetSuiteSettings | None = None,
        session: requests.Session | None = None,
        prompt: Callable[[str], str] = input,
    ) -> None:
        self.settings = settings or load_settings()
        self.settings.validate()

        self._session = session or requests.Session()
        self._prompt = prompt
        self._tokens = TokenState()
        self._refresh_lock = threading.Lock()

        self.logout()
        self._tokens.access_token = self.settings.access_token or None
        self._tokens.refresh_token = self.settings.refresh_token or None

    def __enter__(self) -> "NetSuiteClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    @property
    def token_state(self) -> TokenState:
        """Snapshot of the current tokens (a copy, the client owns the real state)."""
        return dataclasses.replace(self._tokens)

    # ------------------------------------------------------------------
    # Authorization flow
    # ------------------------------------------------------------------

    def authorization_url(self) -> str:
        # A new nonce per attempt; a previous pending one is discarded
        self._tokens.pending_state = new_state()
        return build_authorization_url(
            self.settings.auth_url,
            self.settings.client_id,
            self.settings.redirect_uri,
            self.settings.scopes,
            self._tokens.pending_state,
        )

    def exchange_token(self, token: str, grant_type: str = AUTHORIZATION_CODE) -> dict:
        """
        Trade an authorization code or refresh token for a new token pair
        and store it. Returns the raw token endpoint response.
        """
        result = request_token_pair(
            self._session,
            self.settings.token_url,
            self.settings.client_id,
            self.settings.client_secret,
            token,
            grant_type=grant_type,
            redirect_uri=self.settings.redirect_uri,
            timeout=self.settings.token_timeout,
            debug_enabled=self.settings.debug,
        )
        self._tokens.apply(result, log_token=self.settings.log_token)
        return result

    def _refresh_access_token(self, rejected_token: str | None) -> None:
        with self._refresh_lock:
            if self._tokens.access_token != rejected_token:
                # Another caller already renewed it while we waited
                return
            if not self._tokens.refresh_token:
                raise AuthExchangeError("Cannot renew the current token, please try login again!")
            debug(self.settings.debug, "RefreshToken", "renewing access token")
            self.exchange_token(self._tokens.refresh_token, REFRESH_TOKEN)

    def sign_in(self) -> None:
        """
        Sign in on NetSuite and get the access token and refresh token.

        - access token already informed -> validate it with one metadata call
        - only a refresh token informed -> renew without asking anyone
        - otherwise ask the operator for the authorization code
        """
        announce("💡 NetSuite Authentication step\n")

        if self._tokens.access_token:
            announce("🔑 NetSuite access token already informed.\n")
            self.get_metadata_catalog()
            return

        if self._tokens.refresh_token:
            announce("🔑 NetSuite refresh token informed, renewing access token.\n")
            self._refresh_access_token(None)
            return

        authorize_url = self.authorization_url()
        answer = self._prompt(
            "📢 Please open the following URL in your browser and follow the steps until you see a blank page:\n"
            f"{authorize_url}\n\n"
            "When ready, please enter the value of the code parameter "
            "(from the URL of the blank page) and press return...\n"
        )
        self._tokens.pending_code = extract_authorization_code(answer, self._tokens.pending_state)
        self.exchange_token(self._tokens.pending_code, AUTHORIZATION_CODE)

    def logout(self) -> None:
        """Log out - forget every token."""
        self._tokens.reset()

    # ------------------------------------------------------------------
    # Request executor
    # ------------------------------------------------------------------

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if path and not path.startswith("/"):
            path = "/" + path
        return f"{self.settings.api_url}{path}"

    def _send(
        self, url: str, method: str, body: Any, headers: dict | None, token: str | None
    ) -> requests.Response:
        request_headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }
        request_headers.update(headers or {})

        kwargs: dict[str, Any] = {}
        if isinstance(body, (dict, list)):
            kwargs["json"] = body
        elif body is not None:
            kwargs["data"] = body

        t0 = time.perf_counter()
        resp = self._session.request(
            method, url, headers=request_headers, timeout=self.settings.timeout, **kwargs
        )
        _log(f"[TIMING] {method} {url} took {(time.perf_counter() - t0):.2f}s status={resp.status_code}")
        return resp

    def _renew_token_if_needed(
        self, url: str, method: str, body: Any, headers: dict | None
    ) -> requests.Response:
        token = self._tokens.access_token
        resp = self._send(url, method, body, headers, token)

        # If token was rejected, refresh once and retry
        if resp.status_code == 401:
            _log("[WARN] 401 received, refreshing token and retrying once")
            self._refresh_access_token(token)
            resp = self._send(url, method, body, headers, self._tokens.access_token)

        debug_response(self.settings.debug, "RenewTokenIfNeeded", resp)
        if resp.status_code == 401:
            raise AuthenticationError(resp.reason or "Unauthorized")
        return resp

    @staticmethod
    def _read_payload(resp: requests.Response) -> Any:
        # 204 No Content (DELETE, PATCH) has nothing to parse
        if not resp.content:
            return None
        return resp.json()

    @staticmethod
    def _application_error(resp: requests.Response, payload: Any) -> str | None:
        if isinstance(payload, dict) and "error" in payload:
            error = payload["error"]
            if isinstance(error, dict):
                return str(error.get("message") or error)
            return str(error)

        if resp.status_code >= 400:
            if isinstance(payload, dict):
                details = [
                    d["detail"]
                    for d in payload.get("o:errorDetails") or []
                    if isinstance(d, dict) and d.get("detail")
                ]
                if details:
                    return "; ".join(details)
                if payload.get("title"):
                    return str(payload["title"])
            return resp.reason or f"HTTP {resp.status_code}"

        return None

    def _request_api(
        self, path: str, method: str, body: Any = None, headers: dict | None = None
    ) -> Any:
        url = self._url(path)
        last_error: Exception | None = None

        for attempt in range(1, MAX_RETRIES + 1):
            try:
                resp = self._renew_token_if_needed(url, method, body, headers)
                payload = self._read_payload(resp)
                debug(self.settings.debug, "RequestApi", payload)

                message = self._application_error(resp, payload)
                if message is not None:
                    _log(f"[ERROR] {method} {url}: {message}")
                    if TRANSIENT_PAYLOAD_ERROR in message:
                        return None
                    raise RequestError(method, url)
                return payload
            # Only transport, parse and NetSuite failures are retried; anything else is a bug
            except (requests.RequestException, ValueError, NetSuiteError) as exc:
                last_error = exc
                _log(f"[WARN] {method} {url} attempt {attempt}/{MAX_RETRIES} failed: {exc!r}")
                if attempt < MAX_RETRIES and self.settings.retry_delay:
                    time.sleep(self.settings.retry_delay)

        raise MaxRetriesError(method, url) from last_error

    def request_get(self, path: str, headers: dict | None = None) -> Any:
        return self._request_api(path, "GET", headers=headers)

    def request_post(self, path: str, body: Any = None, headers: dict | None = None) -> Any:
        return self._request_api(path, "POST", body, headers)

    def request_put(self, path: str, body: Any = None, headers: dict | None = None) -> Any:
        return self._request_api(path, "PUT", body, headers)

    def request_delete(self, path: str, body: Any = None, headers: dict | None = None) -> Any:
        return self._request_api(path, "DELETE", body, headers)

    def get_metadata_catalog(self) -> dict:
        """
        Safe test call to confirm auth works.
        """
        return self.request_get("/record/v1/metadata-catalog")

    def execute_suiteql(self, query: str, limit: int | None = None, offset: int | None = None) -> Any:
        """
        Execute a SuiteQL query.
        Note: NetSuite REST SuiteQL 'limit' must be between 1 and 1000.
        """
        path = "/query/v1/suiteql"
        params = {}
        if limit is not None:
            # Guardrails: NetSuite enforces 1..1000
            params["limit"] = min(max(int(limit), 1), 1000)
        if offset is not None:
            params["offset"] = max(int(offset), 0)
        if params:
            path = f"{path}?{urllib.parse.urlencode(params)}"

        return self.request_post(path, {"q": query}, {"Prefer": "transient"})

    # ------------------------------------------------------------------
    # File Cabinet transfer (RESTlet)
    # ------------------------------------------------------------------

    def _require_script(self) -> str:
        if not self.settings.script_id:
            raise ConfigurationError("The NetSuite RESTlet script id is required for file transfer!")
        return self.settings.script_id

    def download_file(self, file_id: int | str, folder_path: str | Path = ".") -> Path:
        """
        Download a File Cabinet file through the RESTlet and save it in `folder_path`.
        The call is made once, without the retry loop. Returns the written path.
        """
        script_id = self._require_script()
        url = restlet_url(self.settings.restlet_url, script_id, self.settings.deploy_id)

        try:
            t0 = time.perf_counter()
            resp = self._session.post(
                url,
                json={"fileId": file_id},
                headers={
                    "Authorization": f"Bearer {self._tokens.access_token}",
                    "Accept": "application/json",
                },
                timeout=self.settings.timeout,
            )
            _log(f"[TIMING] POST {url} took {(time.perf_counter() - t0):.2f}s status={resp.status_code}")
            debug_response(self.settings.debug, "DownloadFile", resp)

            if not 200 <= resp.status_code < 300:
                raise DownloadError(
                    f"Cannot download the file {file_id} from {url}: "
                    f"{resp.status_code} {resp.reason} {resp.text}"
                )

            remote = resp.json()
            content = remote["content"]
            destination = resolve_destination(folder_path, remote["info"]["name"], f"file-{file_id}")
            write_file(destination, decode_content(content))
        except DownloadError:
            raise
        except (requests.RequestException, ValueError, KeyError, TypeError, OSError) as exc:
            debug(self.settings.debug, "DownloadFile", repr(exc))
            raise DownloadError(f"Cannot download the file {file_id}") from exc

        _log(f"[INFO] file {file_id} saved to {destination}")
        return destination

    def upload_file(self, attachment_dir: str | Path, folder_name: str, file: str) -> Any:
        """
        Upload `attachment_dir/file` to the File Cabinet folder `folder_name`.

        A missing local file is skipped and returns None.

        Example:
            # Reads '~/attachments/myfile.pdf' and stores it as 'Invoices/myfile.pdf'
            client.upload_file("~/attachments", "Invoices", "myfile.pdf")
        """
        script_id = self._require_script()
        file_name = file.split("/")[-1]
        file_path = Path(attachment_dir).expanduser() / file

        exists = file_exists(file_path)
        debug(self.settings.debug, "UploadFile", f"File exists? {exists}")
        if not exists:
            _log(f"[WARN] File {file_path} not exists, upload skipped")
            return None

        url = restlet_url(
            self.settings.restlet_url,
            script_id,
            self.settings.deploy_id,
            folder=folder_name,
            name=normalize(file_name),
        )
        try:
            content = file_path.read_bytes()
            return self.request_put(url, content, {"Content-Type": "application/octet-stream"})
        except (OSError, NetSuiteError) as exc:
            debug(self.settings.debug, "UploadFile", {"url": url, "error": repr(exc)})
            raise UploadError(f"Cannot upload a new file in {url}") from exc
