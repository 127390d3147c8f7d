import os
import pprint
import sys
from pathlib import Path

# Always write logs next to this file unless MCP_LOG_FILE says otherwise.
# The client never prints diagnostics to stdout (stdout belongs to MCP stdio).
DEFAULT_LOG = Path(__file__).with_name("mcp_debug.log")
LOG_FILE = Path(os.getenv("MCP_LOG_FILE") or str(DEFAULT_LOG)).expanduser().resolve()


def _log(msg: str) -> None:
    try:
        with open(LOG_FILE, "a", encoding="utf-8") as f:
            f.write(msg + "\n")
            f.flush()
    except OSError:
        pass


def debug(enabled: bool, where: str, message) -> None:
    """
    Dump a structured value to the log file when debug mode is on.
    Diagnostics only; callers never depend on it.
    """
    if not enabled:
        return
    if not isinstance(message, str):
        message = pprint.pformat(message, width=120)
    _log(f"[DEBUG] {where}: {message}")


def debug_response(enabled: bool, where: str, resp) -> None:
    if not enabled:
        return
    debug(
        enabled,
        where,
        {
            "url": resp.url,
            "status": resp.status_code,
            "statusText": resp.reason,
            "body": resp.text[:800],
        },
    )


def announce(msg: str) -> None:
    """Operator-facing message (stderr, so MCP stdio stays clean)."""
    print(msg, file=sys.stderr)
