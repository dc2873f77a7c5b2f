"""Thorn (signature zone): signs ``crown_b64 + "." + petal_enc``."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .protocols import Signer


def signing_input(crown_b64: str, petal_enc: str) -> bytes:
    return f"{crown_b64}.{petal_enc}".encode("utf-8")


def sign(crown_b64: str, petal_enc: str, signer: Signer, key: Any) -> str:
    return signer.sign(signing_input(crown_b64, petal_enc), key)


def verify(crown_b64: str, petal_enc: str, signature: str, signer: Signer, key: Any) -> bool:
    """Return True if ``signature`` is the thorn for the two segments.

    The signer performs a constant-time comparison.
    """
    return signer.verify(signing_input(crown_b64, petal_enc), signature, key)
