"""Immutable JPT configuration.

A TokenConfig is constructed once per issue/verify setup and never mutated.
"Changing" a setting (for example rotating the secret) produces a new
snapshot via with_options()/with_secret(), so operations already holding the
old snapshot are unaffected.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Final

from dotenv import load_dotenv

from .errors import KeyMaterialError, UnsupportedAlgorithm
from .protocols import Signer
from .signers import SUPPORTED_ALGORITHMS, get_signer, is_symmetric

ANY: Final[str] = "*"
"""Allow-list sentinel accepting any issuer/audience."""

_OPTION_ALIASES: Final[dict[str, str]] = {
    "alg": "alg",
    "secret": "secret",
    "publickey": "public_key",
    "public_key": "public_key",
    "privatekey": "private_key",
    "private_key": "private_key",
    "privatekeypassword": "private_key_password",
    "private_key_password": "private_key_password",
    "iss": "iss",
    "aud": "aud",
    "sub": "sub",
    "ttl": "ttl",
    "leeway": "leeway",
    "nbf": "nbf",
    "allowedissuers": "allowed_issuers",
    "allowed_issuers": "allowed_issuers",
    "allowedaudiences": "allowed_audiences",
    "allowed_audiences": "allowed_audiences",
}
"""Recognized option names (lower-cased) mapped to TokenConfig fields."""


def _as_frozenset(value: str | Iterable[str] | None) -> frozenset[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return frozenset({value})
    return frozenset(value)


@dataclass(frozen=True, slots=True)
class TokenConfig:
    """Configuration for issuing and validating JPTs.

    Attributes:
        alg: Algorithm tag written into the crown. One of HS256/384/512,
            RS256/384/512. Default: "HS256".

        secret: Shared secret. Signs HS* tokens and always keys the petal
            cipher, so it is required for RS* configurations as well.

        private_key: RSA private key (PEM or key object) for RS* signing.

        private_key_password: Password of an encrypted private key PEM.

        public_key: RSA public key (PEM or key object) for RS* verification.

        iss, aud, sub: Claims written into every issued crown. ``sub`` is
            omitted when empty.

        ttl: Lifetime in seconds (exp = iat + ttl). Default: 3600.

        leeway: Clock skew tolerance in seconds for nbf/exp. Default: 0.

        nbf: Absolute not-before timestamp for issued tokens. Defaults to
            the issuance time when unset.

        allowed_issuers, allowed_audiences: Accepted ``iss``/``aud`` values
            at validation. ``"*"`` accepts anything. When unset, only the
            config's own ``iss``/``aud`` is accepted.

    Example:
        ```python
        config = TokenConfig(
            secret="change-me",
            iss="auth.example.com",
            aud="payment-service",
            ttl=900,
            allowed_issuers={"auth.example.com"},
            allowed_audiences=ANY,
        )
        ```
    """

    alg: str = "HS256"
    secret: str | bytes | None = field(default=None, repr=False)
    private_key: Any = field(default=None, repr=False)
    private_key_password: str | bytes | None = field(default=None, repr=False)
    public_key: Any = field(default=None, repr=False)
    iss: str = "nameless"
    aud: str = "nameless"
    sub: str | None = None
    ttl: int = 3600
    leeway: int = 0
    nbf: int | None = None
    allowed_issuers: frozenset[str] | None = None
    allowed_audiences: frozenset[str] | None = None

    def __post_init__(self) -> None:
        if self.alg not in SUPPORTED_ALGORITHMS:
            raise UnsupportedAlgorithm(f"Unsupported algorithm: {self.alg}")
        if not isinstance(self.ttl, int) or self.ttl < 0:
            raise ValueError(f"ttl must be a non-negative integer, got {self.ttl!r}")
        if not isinstance(self.leeway, int) or self.leeway < 0:
            raise ValueError(f"leeway must be a non-negative integer, got {self.leeway!r}")

        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "allowed_issuers", _as_frozenset(self.allowed_issuers))
        object.__setattr__(self, "allowed_audiences", _as_frozenset(self.allowed_audiences))

    # ------------------------------------------------------------------
    # Alternate constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> TokenConfig:
        """Build a config from a loose options mapping.

        Keys are case-insensitive, camelCase aliases such as ``publicKey`` or
        ``allowedIssuers`` are accepted, and unknown keys are ignored.
        """
        kwargs: dict[str, Any] = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(str(key).lower())
            if name is not None:
                kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def from_env(
        cls,
        prefix: str = "JPT_",
        *,
        dotenv_path: str | os.PathLike[str] | None = None,
    ) -> TokenConfig:
        """Build a config from environment variables (after loading ``.env``).

        Recognized variables (with the default prefix): JPT_ALG, JPT_SECRET,
        JPT_PRIVATE_KEY, JPT_PRIVATE_KEY_PASSWORD, JPT_PUBLIC_KEY, JPT_ISS,
        JPT_AUD, JPT_SUB, JPT_TTL, JPT_LEEWAY, JPT_NBF, JPT_ALLOWED_ISSUERS
        and JPT_ALLOWED_AUDIENCES (comma-separated).
        """
        load_dotenv(dotenv_path)

        def env(name: str) -> str | None:
            value = os.environ.get(f"{prefix}{name}")
            return value if value not in (None, "") else None

        kwargs: dict[str, Any] = {}
        for name in ("alg", "secret", "private_key", "private_key_password",
                     "public_key", "iss", "aud", "sub"):
            value = env(name.upper())
            if value is not None:
                kwargs[name] = value
        for name in ("ttl", "leeway", "nbf"):
            value = env(name.upper())
            if value is not None:
                kwargs[name] = int(value)
        for name in ("allowed_issuers", "allowed_audiences"):
            value = env(name.upper())
            if value is not None:
                kwargs[name] = frozenset(v.strip() for v in value.split(",") if v.strip())
        return cls(**kwargs)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def with_options(self, **changes: Any) -> TokenConfig:
        return replace(self, **changes)

    def with_secret(self, secret: str | bytes) -> TokenConfig:
        return replace(self, secret=secret)

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def accepted_issuers(self) -> frozenset[str]:
        if self.allowed_issuers is None:
            return frozenset({self.iss})
        return self.allowed_issuers

    @property
    def accepted_audiences(self) -> frozenset[str]:
        if self.allowed_audiences is None:
            return frozenset({self.aud})
        return self.allowed_audiences

    @property
    def cipher_key(self) -> bytes:
        """Petal cipher key (the secret as bytes)."""
        if self.secret is None:
            raise KeyMaterialError("A secret is required to encrypt the petal")
        if isinstance(self.secret, str):
            return self.secret.encode("utf-8")
        return self.secret

    def signer_for(self, alg: str) -> Signer:
        return get_signer(alg, password=self.private_key_password)

    def signing_key_for(self, alg: str) -> Any:
        return self.secret if is_symmetric(alg) else self.private_key

    def verification_key_for(self, alg: str) -> Any:
        return self.secret if is_symmetric(alg) else self.public_key
