"""One-stop JPT object: configuration, issuer and validator together."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .ciphers import AesGcmCipher
from .config import TokenConfig
from .issuer import ClaimsDraft, TokenIssuer
from .validator import TokenValidator

if TYPE_CHECKING:
    from .payload import TokenPayload
    from .protocols import Cipher

logger = logging.getLogger(__name__)


class Jpt:
    """Issue and validate tokens with a single configuration snapshot.

    A Jpt never changes its configuration. with_options() and rekey()
    return a new Jpt; tokens being validated by the old instance keep using
    the old snapshot.

    Example:
        ```python
        jpt = Jpt(TokenConfig(secret="s3cret", iss="auth", aud="api"))
        token = jpt.issue(crown={"role": "admin"}, petal={"uid": 42})
        payload = jpt.validate(token)
        assert payload.petal_claim("uid") == 42

        rotated = jpt.rekey("n3w-s3cret")
        ```
    """

    def __init__(self, config: TokenConfig | None = None, cipher: Cipher | None = None) -> None:
        self._config = config or TokenConfig()
        self._cipher_injected = cipher is not None
        self._cipher = cipher or AesGcmCipher(self._config.secret)
        self._issuer = TokenIssuer(self._config, self._cipher)
        self._validator = TokenValidator(self._config, self._cipher)

    @classmethod
    def from_options(cls, options: Mapping[str, Any], cipher: Cipher | None = None) -> Jpt:
        return cls(TokenConfig.from_mapping(options), cipher)

    @property
    def config(self) -> TokenConfig:
        return self._config

    @property
    def cipher(self) -> Cipher:
        return self._cipher

    @property
    def issuer(self) -> TokenIssuer:
        return self._issuer

    @property
    def validator(self) -> TokenValidator:
        return self._validator

    def with_options(self, **changes: Any) -> Jpt:
        """Return a Jpt for the changed config.

        An injected cipher is shared with the new instance and re-seeded when
        the secret changes; the default cipher is never shared.
        """
        config = self._config.with_options(**changes)
        rotated = "secret" in changes and changes["secret"] is not None
        if rotated:
            logger.info("JPT secret rotated")

        if not self._cipher_injected:
            # The new snapshot gets its own cipher; this one keeps its seed.
            return Jpt(config)
        if rotated:
            self._cipher.update_seed(config.cipher_key)
        return Jpt(config, self._cipher)

    def rekey(self, secret: str | bytes) -> Jpt:
        return self.with_options(secret=secret)

    def draft(self) -> ClaimsDraft:
        return ClaimsDraft()

    def issue(
        self,
        crown: Mapping[str, Any] | None = None,
        petal: Mapping[str, Any] | None = None,
    ) -> str:
        return self._issuer.issue(crown, petal)

    def issue_payload(
        self,
        crown: Mapping[str, Any] | None = None,
        petal: Mapping[str, Any] | None = None,
    ) -> TokenPayload:
        return self._issuer.issue_payload(crown, petal)

    def validate(self, token: str) -> TokenPayload:
        return self._validator.verify(token)
