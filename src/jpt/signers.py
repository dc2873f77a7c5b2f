"""Thorn signers: HMAC (HS256/384/512) and RSA PKCS#1 v1.5 (RS256/384/512).

Both signers delegate the cryptographic primitive to PyJWT's algorithm
objects (backed by ``cryptography`` for RSA) and only add the JPT contract
on top: URL-safe string signatures, constant-time verification and typed
errors.
"""

from __future__ import annotations

import hmac
from typing import Any, Final

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from jwt.algorithms import HMACAlgorithm, RSAAlgorithm
from jwt.exceptions import InvalidKeyError

from .codec import b64url_decode, b64url_encode
from .errors import (
    CryptoBackendError,
    DecodeError,
    KeyMaterialError,
    UnsupportedAlgorithm,
)
from .protocols import Signer

HMAC_ALGORITHMS: Final[dict[str, Any]] = {
    "HS256": HMACAlgorithm.SHA256,
    "HS384": HMACAlgorithm.SHA384,
    "HS512": HMACAlgorithm.SHA512,
}

RSA_ALGORITHMS: Final[dict[str, Any]] = {
    "RS256": RSAAlgorithm.SHA256,
    "RS384": RSAAlgorithm.SHA384,
    "RS512": RSAAlgorithm.SHA512,
}

SUPPORTED_ALGORITHMS: Final[frozenset[str]] = frozenset(HMAC_ALGORITHMS) | frozenset(
    RSA_ALGORITHMS
)
"""Every algorithm tag accepted in a crown's ``alg``."""


def is_symmetric(alg: str) -> bool:
    return alg in HMAC_ALGORITHMS


def _to_bytes(key: str | bytes) -> bytes:
    return key.encode("utf-8") if isinstance(key, str) else key


class HmacSigner:
    """HMAC signer for the HS* family.

    The key is the shared secret (str or bytes). PEM-looking secrets are
    refused by PyJWT to avoid algorithm confusion with RSA public keys.
    """

    def __init__(self, algorithm: str = "HS256") -> None:
        if algorithm not in HMAC_ALGORITHMS:
            raise UnsupportedAlgorithm(f"Unsupported HMAC algorithm: {algorithm}")
        self._algorithm = algorithm
        self._impl = HMACAlgorithm(HMAC_ALGORITHMS[algorithm])

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def _prepare(self, key: str | bytes | None) -> bytes:
        if key is None:
            raise KeyMaterialError(f"{self._algorithm} requires a secret")
        try:
            return self._impl.prepare_key(key)
        except InvalidKeyError as e:
            raise KeyMaterialError("Secret cannot be used as an HMAC key") from e

    def sign(self, data: bytes, key: str | bytes | None) -> str:
        raw = self._impl.sign(data, self._prepare(key))
        return b64url_encode(raw)

    def verify(self, data: bytes, signature: str, key: str | bytes | None) -> bool:
        expected = self.sign(data, key)
        # Compare the encoded forms so that every character of the thorn counts.
        return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


class RsaSigner:
    """RSA PKCS#1 v1.5 signer for the RS* family.

    Private keys may be password-protected; the password is given at
    construction. Keys may be PEM strings/bytes or ``cryptography`` key objects.

    Attributes:
        _private_key: Default signing key, used when sign() receives no key.
        _public_key: Verification key; takes precedence over the key passed
            to verify().
        _password: Password for an encrypted private key PEM.
    """

    def __init__(
        self,
        algorithm: str = "RS256",
        private_key: Any = None,
        public_key: Any = None,
        password: str | bytes | None = None,
    ) -> None:
        if algorithm not in RSA_ALGORITHMS:
            raise UnsupportedAlgorithm(f"Unsupported RSA algorithm: {algorithm}")
        self._algorithm = algorithm
        self._impl = RSAAlgorithm(RSA_ALGORITHMS[algorithm])
        self._private_key = private_key
        self._public_key = public_key
        self._password = _to_bytes(password) if password is not None else None

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def _load_private(self, key: Any) -> Any:
        if key is None:
            raise KeyMaterialError(f"{self._algorithm} signing requires a private key")
        try:
            if isinstance(key, (str, bytes)):
                if self._password is not None:
                    key = serialization.load_pem_private_key(
                        _to_bytes(key), password=self._password
                    )
                else:
                    key = self._impl.prepare_key(key)
        except (InvalidKeyError, ValueError, TypeError) as e:
            raise KeyMaterialError("Invalid private key") from e

        if not isinstance(key, RSAPrivateKey):
            raise KeyMaterialError("A private RSA key is required for signing")
        return key

    def _load_public(self, key: Any) -> Any:
        if key is None:
            raise KeyMaterialError("Public key required for verification")
        try:
            prepared = self._impl.prepare_key(key)
        except (InvalidKeyError, ValueError, TypeError) as e:
            raise KeyMaterialError("Invalid public key") from e

        if isinstance(prepared, RSAPrivateKey):
            return prepared.public_key()
        return prepared

    def sign(self, data: bytes, key: Any = None) -> str:
        private_key = self._load_private(key if key is not None else self._private_key)
        try:
            raw = self._impl.sign(data, private_key)
        except Exception as e:
            raise KeyMaterialError("RSA signing failed") from e
        return b64url_encode(raw)

    def verify(self, data: bytes, signature: str, key: Any = None) -> bool:
        public_key = self._load_public(
            self._public_key if self._public_key is not None else key
        )

        try:
            raw = b64url_decode(signature)
        except DecodeError:
            return False
        # Reject non-canonical encodings so that the thorn string is exact.
        if b64url_encode(raw) != signature:
            return False

        try:
            return self._impl.verify(data, public_key, raw)
        except Exception as e:
            raise CryptoBackendError("RSA verification error") from e


def get_signer(
    algorithm: str,
    *,
    private_key: Any = None,
    public_key: Any = None,
    password: str | bytes | None = None,
) -> Signer:
    """Return the signer implementing ``algorithm``.

    Raises:
        UnsupportedAlgorithm: If the tag is not HS256/384/512 or RS256/384/512.
    """
    if not isinstance(algorithm, str):
        raise UnsupportedAlgorithm("Algorithm tag must be a string")
    if algorithm in HMAC_ALGORITHMS:
        return HmacSigner(algorithm)
    if algorithm in RSA_ALGORITHMS:
        return RsaSigner(
            algorithm,
            private_key=private_key,
            public_key=public_key,
            password=password,
        )
    raise UnsupportedAlgorithm(f"Unsupported algorithm: {algorithm}")
