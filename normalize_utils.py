"""
normalize_utils.py

Helpers to normalize, encode and decode text so it can be used as a
NetSuite File Cabinet name, a URL segment and a local file name.
"""

import re
from urllib.parse import quote, unquote

_LINKS = re.compile(r"https?://[^ ~]+")
_RESERVED = re.compile(r'["{}*:<>?/%+|\\]')
_CONTROL = re.compile(r"[\r\t]")
_DOTS = re.compile(r"\.{2,}")
_SPACES = re.compile(r"\s+")
_LEADING = re.compile(r"^[\s~.]+")
_TRAILING = re.compile(r"[\s.]+$")


def remove_links(text: str) -> str:
    return _LINKS.sub("", text)


def normalize(text: str) -> str:
    """
    Strip characters that are illegal in NetSuite names, URLs or file paths.

    Examples:
        normalize("Ampersand (&)")  -> "Ampersand (and)"
        normalize("te...st")        -> "te.st"
        normalize("~test.")         -> "test"
    """
    text = remove_links(text)
    text = _RESERVED.sub("", text)
    text = _CONTROL.sub("", text)
    text = text.replace("\n", " - ")
    text = text.replace("&", "and")
    text = _DOTS.sub(".", text)
    text = _SPACES.sub(" ", text)
    text = _LEADING.sub("", text)
    text = _TRAILING.sub("", text)
    return text


def encode_rfc3986(text: str) -> str:
    # "!'()*" are escaped too, "~" stays unreserved
    return quote(text, safe="")


def encode(text: str) -> str:
    return encode_rfc3986(normalize(text))


def decode(text: str) -> str:
    return normalize(unquote(text))
