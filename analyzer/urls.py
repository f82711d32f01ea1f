"""
URL normalization for user-submitted addresses.
"""

import re
from urllib.parse import urlsplit, urlunsplit

SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
HTTP_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


class InvalidURLError(ValueError):
    """Raised when user input cannot be turned into an http(s) URL"""

    pass


def normalize_url(raw: str) -> str:
    """
    Trim and validate a user-supplied URL.

    Schemeless input gets an ``https://`` prefix. Input that already carries a
    scheme is kept as typed, only the ``#fragment`` is dropped.

    Raises:
        InvalidURLError: empty input, a non-http(s) scheme, or no host
    """
    s = (raw or "").strip()
    if not s:
        raise InvalidURLError("Missing url")

    if not SCHEME_RE.match(s):
        s = f"https://{s}"

    parts = urlsplit(s)
    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidURLError(f"Unsupported URL scheme: {parts.scheme}")
    if not parts.netloc:
        raise InvalidURLError(f"URL has no host: {raw}")

    if parts.fragment:
        s = urlunsplit(parts._replace(fragment=""))
    return s


def has_http_scheme(url: str) -> bool:
    return bool(HTTP_SCHEME_RE.match(url or ""))


def host_of(url: str) -> str:
    """Network location of ``url`` or an empty string"""
    try:
        return urlsplit(url or "").netloc
    except ValueError:
        return ""
