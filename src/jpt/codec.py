"""URL-safe encoding helpers for JPT segments.

Crown and thorn segments are URL-safe base64 without padding (``+/`` become
``-_`` and trailing ``=`` are stripped), the same alphabet JWTs use, so the
PyJWT helpers are reused here.

Digest stability depends on ``canonical_json``: compact separators, slashes
and non-ASCII characters left unescaped. Key order is the mapping's own order.
"""

from __future__ import annotations

import json
from typing import Any

from jwt.utils import base64url_decode, base64url_encode

from .errors import DecodeError


def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded URL-safe base64."""
    return base64url_encode(data).decode("ascii")


def b64url_decode(data: str) -> bytes:
    """Decode unpadded URL-safe base64.

    Raises:
        DecodeError: If ``data`` is not valid base64.
    """
    try:
        return base64url_decode(data)
    except (ValueError, TypeError) as e:
        raise DecodeError("Malformed base64 segment") from e


def canonical_json(obj: Any) -> bytes:
    """Serialize ``obj`` the way digests and segments are computed."""
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def encode_json(obj: Any) -> str:
    return b64url_encode(canonical_json(obj))


def parse_json_object(raw: bytes) -> dict[str, Any]:
    """Parse a JSON document that must be an object.

    Raises:
        DecodeError: Invalid UTF-8, invalid JSON, or a non-object document.
    """
    try:
        obj = json.loads(raw)
    except ValueError as e:
        raise DecodeError("Malformed JSON segment") from e

    if not isinstance(obj, dict):
        raise DecodeError("Token segment is not a JSON object")
    return obj


def decode_json(data: str) -> dict[str, Any]:
    return parse_json_object(b64url_decode(data))
