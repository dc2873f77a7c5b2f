"""Petal (private zone) construction, encryption and digest binding.

The petal always carries ``digest``: the SHA-256 hex of the canonical JSON of
the final crown. The codec owns that field; any caller-supplied ``digest`` is
overwritten.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Final

from .codec import b64url_decode, b64url_encode, canonical_json, parse_json_object
from .crown import drop_nulls
from .errors import DecodeError, MissingField

if TYPE_CHECKING:
    from .protocols import Cipher, Crown, Petal

DIGEST_KEY: Final[str] = "digest"


def compute_digest(crown: Mapping[str, Any]) -> str:
    return hashlib.sha256(canonical_json(crown)).hexdigest()


def build(
    private_claims: Mapping[str, Any] | None,
    final_crown: Mapping[str, Any],
    cipher: Cipher,
    key: bytes,
) -> tuple[Petal, str]:
    """Build and encrypt the petal for ``final_crown``.

    Returns:
        The petal map and its wire form (URL-safe base64 of the ciphertext).
    """
    petal = dict(private_claims or {})
    petal[DIGEST_KEY] = compute_digest(final_crown)
    petal = drop_nulls(petal)

    ciphertext = cipher.encrypt(canonical_json(petal), key)
    return petal, b64url_encode(ciphertext)


def decode(encrypted: str, cipher: Cipher, key: bytes) -> Petal:
    """Decrypt and parse a petal segment.

    Raises:
        DecodeError: The base64, cipher or JSON step failed.
        MissingField: The petal has no ``digest`` (code INVALID_PETAL).
    """
    ciphertext = b64url_decode(encrypted)
    try:
        plaintext = cipher.decrypt(ciphertext, key)
    except Exception as e:
        # Cipher implementations are pluggable; normalize whatever they raise.
        raise DecodeError("Unable to decrypt petal") from e

    petal = parse_json_object(plaintext)
    if DIGEST_KEY not in petal:
        raise MissingField(DIGEST_KEY, zone="petal")
    return petal


def verify_digest(petal: Mapping[str, Any], crown: Crown) -> bool:
    digest = petal.get(DIGEST_KEY)
    if not isinstance(digest, str):
        return False
    return hmac.compare_digest(compute_digest(crown).encode("ascii"), digest.encode("utf-8"))
