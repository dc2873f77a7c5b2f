"""Where a JPT travels in an HTTP request.

Implementations of the Extractor protocol:
- BearerExtractor: ``Authorization: Bearer <crown.petal.thorn>`` (recommended)
- CookieExtractor: a cookie holding the token (browser apps)

Both return the raw token only after checking its shape, so a value that
cannot be a JPT is rejected as FormatError without touching the validator.

Security Considerations:
- Cookie transport needs HttpOnly, Secure and CSRF protection
- Tokens are never read from query parameters (they end up in logs)
"""

from __future__ import annotations

from typing import Final

from flask import request

from .errors import FormatError, MissingToken

DEFAULT_COOKIE: Final[str] = "jpt"
"""Cookie name shared by CookieExtractor and get_verified_payload()."""

_SEGMENTS: Final[int] = 3


def _token_shape(token: str, source: str) -> str:
    token = token.strip()
    if not token:
        raise MissingToken(f"Empty token in {source}")
    if token.count(".") != _SEGMENTS - 1:
        raise FormatError(f"Token in {source} is not crown.petal.thorn")
    return token


class BearerExtractor:
    """Reads the token from a Bearer authorization header.

    Attributes:
        _header: Header name, ``Authorization`` unless a gateway renames it.
    """

    def __init__(self, header: str = "Authorization") -> None:
        self._header = header

    def extract(self) -> str:
        """
        Raises:
            MissingToken: No header, another scheme, or an empty token.
            FormatError: The value is not three dot-separated segments.
        """
        scheme, _, token = request.headers.get(self._header, "").strip().partition(" ")
        if not scheme:
            raise MissingToken(f"Missing {self._header} header")
        if scheme.lower() != "bearer":
            raise MissingToken(f"Expected 'Bearer <token>' in {self._header} header")
        return _token_shape(token, f"{self._header} header")


class CookieExtractor:
    """Reads the token from a cookie (``jpt`` by default)."""

    def __init__(self, cookie_name: str = DEFAULT_COOKIE) -> None:
        if not cookie_name or not cookie_name.strip():
            raise ValueError("cookie_name cannot be empty")
        self._name = cookie_name

    @property
    def cookie_name(self) -> str:
        return self._name

    def extract(self) -> str:
        token = request.cookies.get(self._name)
        if token is None:
            raise MissingToken(f"Missing cookie '{self._name}'")
        return _token_shape(token, f"cookie '{self._name}'")
