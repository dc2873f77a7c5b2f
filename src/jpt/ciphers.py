"""Default petal cipher.

The token layer only depends on the Cipher protocol; AesGcmCipher is the
implementation used when none is injected. Ciphertext layout is
``nonce (12 bytes) || AES-256-GCM ciphertext+tag``. The AES key is derived
from the seed with HKDF-SHA256.
"""

from __future__ import annotations

import os
from typing import Final

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

_NONCE_SIZE: Final[int] = 12
_HKDF_INFO: Final[bytes] = b"jpt/petal/aes-256-gcm"


def _derive(seed: bytes) -> AESGCM:
    key = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=_HKDF_INFO).derive(seed)
    return AESGCM(key)


class AesGcmCipher:
    """AES-256-GCM petal cipher keyed by a seed (the config secret).

    The derived key for the most recent seed is cached. Every call derives
    from the key it is given, so re-seeding never affects a call made with a
    different key.

    Example:
        ```python
        cipher = AesGcmCipher(b"secret")
        blob = cipher.encrypt(b"{}", b"secret")
        assert cipher.decrypt(blob, b"secret") == b"{}"
        ```
    """

    def __init__(self, seed: bytes | str | None = None) -> None:
        self._state: tuple[bytes, AESGCM] | None = None
        if seed is not None:
            self.update_seed(seed)

    def update_seed(self, key: bytes | str) -> None:
        seed = key.encode("utf-8") if isinstance(key, str) else key
        # Single assignment keeps (seed, aead) consistent for concurrent readers.
        self._state = (seed, _derive(seed))

    @property
    def seed(self) -> bytes | None:
        return self._state[0] if self._state is not None else None

    def _aead(self, key: bytes) -> AESGCM:
        state = self._state
        if state is not None and state[0] == key:
            return state[1]
        aead = _derive(key)
        self._state = (key, aead)
        return aead

    def encrypt(self, plaintext: bytes, key: bytes) -> bytes:
        nonce = os.urandom(_NONCE_SIZE)
        return nonce + self._aead(key).encrypt(nonce, plaintext, None)

    def decrypt(self, ciphertext: bytes, key: bytes) -> bytes:
        """Decrypt a blob produced by encrypt().

        Raises:
            ValueError: The blob is truncated.
            cryptography.exceptions.InvalidTag: Wrong key or tampered data.
        """
        if len(ciphertext) <= _NONCE_SIZE:
            raise ValueError("Ciphertext is too short")
        nonce, body = ciphertext[:_NONCE_SIZE], ciphertext[_NONCE_SIZE:]
        return self._aead(key).decrypt(nonce, body, None)
