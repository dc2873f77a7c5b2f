"""Token issuance: build -> digest -> encrypt -> sign -> join.

TokenIssuer turns a TokenConfig plus caller claims into a wire token.
ClaimsDraft is an immutable builder for the caller claims: every ``with_*``
or ``without_*`` call returns a new draft, so a draft can be shared between
threads and reused as a template.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from . import crown as crown_zone
from . import petal as petal_zone
from . import thorn
from .ciphers import AesGcmCipher
from .codec import encode_json
from .payload import TokenPayload

if TYPE_CHECKING:
    from .config import TokenConfig
    from .protocols import Cipher, Signer

logger = logging.getLogger(__name__)


def _frozen(data: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True, slots=True)
class ClaimsDraft:
    """Immutable set of caller claims for the next token.

    Reserved crown keys and the petal ``digest`` are silently ignored, the
    same way the issuing pipeline ignores them.

    Example:
        ```python
        base = ClaimsDraft().with_crown("scope", "read")
        token = issuer.issue_draft(base.with_petal("uid", 42))
        ```
    """

    crown: Mapping[str, Any] = field(default_factory=_frozen)
    petal: Mapping[str, Any] = field(default_factory=_frozen)

    def with_crown(self, key: str, value: Any) -> ClaimsDraft:
        return ClaimsDraft(_frozen(crown_zone.with_claim(self.crown, key, value)), self.petal)

    def without_crown(self, key: str) -> ClaimsDraft:
        return ClaimsDraft(_frozen(crown_zone.without_claim(self.crown, key)), self.petal)

    def with_crown_data(self, claims: Mapping[str, Any]) -> ClaimsDraft:
        merged = {**self.crown, **crown_zone.strip_reserved(claims)}
        return ClaimsDraft(_frozen(merged), self.petal)

    def with_petal(self, key: str, value: Any) -> ClaimsDraft:
        if key == petal_zone.DIGEST_KEY:
            return self
        return ClaimsDraft(self.crown, _frozen({**self.petal, key: value}))

    def without_petal(self, key: str) -> ClaimsDraft:
        data = dict(self.petal)
        data.pop(key, None)
        return ClaimsDraft(self.crown, _frozen(data))

    def with_petal_data(self, claims: Mapping[str, Any]) -> ClaimsDraft:
        """Replace the petal claims wholesale (``digest`` is dropped)."""
        data = {k: v for k, v in claims.items() if k != petal_zone.DIGEST_KEY}
        return ClaimsDraft(self.crown, _frozen(data))


class TokenIssuer:
    """Issue JPTs for one immutable configuration.

    Thread Safety:
        The config is frozen and the signer is stateless, so one issuer can
        serve concurrent requests as long as the cipher is thread-safe
        (AesGcmCipher is).

    Attributes:
        _config: Issuing configuration.
        _cipher: Petal cipher, keyed with ``config.secret``.
        _signer: Signer for ``config.alg``.
    """

    def __init__(
        self,
        config: TokenConfig,
        cipher: Cipher | None = None,
        signer: Signer | None = None,
    ) -> None:
        self._config = config
        self._cipher = cipher or AesGcmCipher()
        self._signer = signer or config.signer_for(config.alg)

    @property
    def config(self) -> TokenConfig:
        return self._config

    def _encode(
        self,
        crown_claims: Mapping[str, Any] | None,
        petal_claims: Mapping[str, Any] | None,
    ) -> tuple[str, dict[str, Any], dict[str, Any]]:
        cfg = self._config

        crown_map = crown_zone.build(cfg, crown_claims)
        petal_map, petal_enc = petal_zone.build(petal_claims, crown_map, self._cipher, cfg.cipher_key)

        crown_b64 = encode_json(crown_map)
        signature = thorn.sign(crown_b64, petal_enc, self._signer, cfg.signing_key_for(cfg.alg))

        logger.debug("Issued token jti=%s alg=%s", crown_map["jti"], crown_map["alg"])
        return f"{crown_b64}.{petal_enc}.{signature}", crown_map, petal_map

    def issue(
        self,
        crown: Mapping[str, Any] | None = None,
        petal: Mapping[str, Any] | None = None,
    ) -> str:
        """Issue a token string.

        Args:
            crown: Public custom claims. Reserved keys are ignored.
            petal: Private custom claims. ``digest`` is ignored.

        Raises:
            KeyMaterialError: Secret or private key missing/unusable.
        """
        token, _, _ = self._encode(crown, petal)
        return token

    def issue_draft(self, draft: ClaimsDraft) -> str:
        return self.issue(draft.crown, draft.petal)

    def issue_payload(
        self,
        crown: Mapping[str, Any] | None = None,
        petal: Mapping[str, Any] | None = None,
    ) -> TokenPayload:
        """Issue a token and wrap it as a TokenPayload without re-validating."""
        token, crown_map, petal_map = self._encode(crown, petal)
        return TokenPayload.from_zones(token, crown_map, petal_map)
