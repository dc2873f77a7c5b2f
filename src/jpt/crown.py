"""Crown (public zone) construction and parsing.

Reserved-field policy
---------------------
The reserved keys ``iss, sub, aud, nbf, iat, exp, jti, alg, typ`` belong to
the issuing process. Caller claims can never set or remove them: build()
strips them from caller input, and with_claim()/without_claim() silently
ignore them. This keeps every crown self-consistent with the config that
issued it.
"""

from __future__ import annotations

import hashlib
import logging
import random
import secrets
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Final

from .codec import decode_json
from .errors import MissingField

if TYPE_CHECKING:
    from .config import TokenConfig
    from .protocols import Crown

logger = logging.getLogger(__name__)

RESERVED_KEYS: Final[frozenset[str]] = frozenset(
    {"iss", "sub", "aud", "nbf", "iat", "exp", "jti", "alg", "typ"}
)

TOKEN_TYPE: Final[str] = "JPT"
JTI_PREFIX: Final[str] = "jpt."


def new_jti() -> str:
    """Return a unique token id: ``"jpt."`` + 16 random bytes as hex.

    Falls back to a non-cryptographic id when the OS randomness source is
    unavailable. The fallback is logged as a security event.
    """
    try:
        return JTI_PREFIX + secrets.token_hex(16)
    except (NotImplementedError, OSError):
        logger.warning(
            "Secure randomness unavailable; jti generated from a non-cryptographic source"
        )
        seed = f"{JTI_PREFIX}{time.time_ns()}.{random.random()}".encode()
        return JTI_PREFIX + hashlib.md5(seed, usedforsecurity=False).hexdigest()


def strip_reserved(claims: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in claims.items() if k not in RESERVED_KEYS}


def drop_nulls(data: Mapping[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


def with_claim(crown: Mapping[str, Any], key: str, value: Any) -> dict[str, Any]:
    """Return a copy of ``crown`` with ``key`` set. Reserved keys are ignored."""
    updated = dict(crown)
    if key not in RESERVED_KEYS:
        updated[key] = value
    return updated


def without_claim(crown: Mapping[str, Any], key: str) -> dict[str, Any]:
    """Return a copy of ``crown`` without ``key``. Reserved keys are kept."""
    updated = dict(crown)
    if key not in RESERVED_KEYS:
        updated.pop(key, None)
    return updated


def build(config: TokenConfig, caller_claims: Mapping[str, Any] | None = None) -> Crown:
    """Build the final crown for a new token.

    Args:
        config: Issuing configuration (alg, iss, aud, sub, ttl, nbf).
        caller_claims: Custom public claims. Reserved keys are discarded.

    Returns:
        Crown in wire order with null values removed.
    """
    iat = int(time.time())

    crown: dict[str, Any] = {
        "iss": config.iss,
        "sub": config.sub or None,
        "aud": config.aud,
        "nbf": config.nbf if config.nbf is not None else iat,
        "iat": iat,
        "exp": iat + config.ttl,
        "jti": new_jti(),
    }
    crown.update(strip_reserved(caller_claims or {}))
    crown["alg"] = config.alg
    crown["typ"] = TOKEN_TYPE

    return drop_nulls(crown)


def decode(crown_b64: str) -> Crown:
    """Decode a crown segment.

    Raises:
        DecodeError: Malformed base64 or JSON.
        MissingField: The crown has no ``alg`` (code INVALID_CROWN).
    """
    crown = decode_json(crown_b64)
    if crown.get("alg") is None:
        raise MissingField("alg", zone="crown")
    return crown
