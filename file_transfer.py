"""
file_transfer.py

Helpers for moving File Cabinet files through the download/upload RESTlet:
payload decoding, destination paths and RESTlet URLs.
"""

import base64
import re
import urllib.parse
from pathlib import Path

from normalize_utils import normalize

# Groups of 4 base64 chars, optionally ending with 1-2 padding chars
BASE64_PATTERN = re.compile(r"^(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?$")


def is_base64(content: str) -> bool:
    return bool(BASE64_PATTERN.match(content))


def decode_content(content: str) -> bytes | str:
    """
    RESTlets return binary files base64 encoded and text files as-is.
    """
    if is_base64(content):
        return base64.b64decode(content)
    return content


def restlet_url(base_url: str, script_id: str, deploy_id: str, **params) -> str:
    query = {"script": script_id, "deploy": deploy_id}
    query.update(params)
    return f"{base_url}?" + urllib.parse.urlencode(query)


def resolve_destination(folder_path: str | Path, name: str, fallback: str) -> Path:
    file_name = normalize(name or "") or fallback
    return Path(folder_path).expanduser().resolve() / file_name


def write_file(path: Path, content: bytes | str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def file_exists(path: str | Path) -> bool:
    return Path(path).is_file()
