"""Protocol definitions for the JPT package.

This module defines structural interfaces using Protocol (PEP 544) for:
- Signature algorithms (Signer)
- Petal encryption (Cipher)
- Token verification (TokenVerifier)
- Token extraction from Flask requests (Extractor)

Using protocols allows for duck-typing and easier testing/mocking without
requiring explicit inheritance. Any class that implements the required methods
satisfies the protocol.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias

if TYPE_CHECKING:
    from .payload import TokenPayload

# ============================================================================
# Type Aliases
# ============================================================================

Claims: TypeAlias = Mapping[str, Any]
"""Caller-supplied or decoded claims as a read-only mapping."""

Crown: TypeAlias = dict[str, Any]
"""Public claim zone. Insertion order is the wire order."""

Petal: TypeAlias = dict[str, Any]
"""Private claim zone, always carrying the ``digest`` binding."""

ViewFunc: TypeAlias = Callable[..., Any]
"""Type alias for Flask view functions."""


# ============================================================================
# Core Protocols
# ============================================================================


class Signer(Protocol):
    """Protocol for thorn signature algorithms.

    Implementations are identified by an algorithm tag (``HS256``, ``RS512``,
    ...) which travels inside the crown as ``alg``.
    """

    @property
    def algorithm(self) -> str:
        """Algorithm tag, e.g. "HS256"."""
        ...

    def sign(self, data: bytes, key: Any) -> str:
        """Sign ``data`` and return the URL-safe encoded signature.

        Raises:
            KeyMaterialError: The key is missing or cannot be parsed.
        """
        ...

    def verify(self, data: bytes, signature: str, key: Any) -> bool:
        """Return True if ``signature`` is valid for ``data``.

        Comparison must be constant-time. A wrong signature returns False;
        only key or backend problems raise.
        """
        ...


class Cipher(Protocol):
    """Protocol for the symmetric cipher that protects the petal.

    The token layer never inspects the ciphertext format. It only requires
    that ``decrypt(encrypt(p, k), k) == p``.
    """

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        """Encrypt ``plaintext`` under ``key``."""
        ...

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        """Decrypt ``ciphertext`` under ``key``.

        Raises:
            Exception: Any exception is treated as a decode failure by the
                petal codec.
        """
        ...

    def update_seed(self, key: bytes) -> None:
        """Re-key an existing instance, discarding state derived from the old key."""
        ...


class TokenVerifier(Protocol):
    """Protocol for objects that turn a raw token into a validated payload."""

    def verify(self, token: str) -> TokenPayload:
        """Validate ``token`` and return its payload.

        Raises:
            InvalidToken: Any validation failure (see jpt.errors).
        """
        ...


class Extractor(Protocol):
    """Protocol for extracting a raw token from the current Flask request."""

    def extract(self) -> str:
        """Return the raw token string.

        Raises:
            MissingToken: Token not found or improperly formatted.
        """
        ...
