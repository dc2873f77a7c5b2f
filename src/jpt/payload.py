"""Read-only view of a validated token."""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


def _as_int(value: Any, default: int = 0) -> int:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return int(value)
    return default


@dataclass(frozen=True, slots=True)
class TokenPayload:
    """Immutable result of a successful validation.

    Only TokenValidator.verify() and TokenIssuer.issue_payload() create
    payloads. ``crown`` and ``petal`` are read-only mappings (the petal
    includes ``digest``).

    Example:
        ```python
        payload = validator.verify(raw_token)
        user_id = payload.sub
        tenant = payload.petal_claim("tenant")
        ```
    """

    iss: str | None
    sub: str | None
    aud: str | None
    iat: int
    exp: int
    nbf: int
    jti: str
    alg: str
    typ: str
    token: str = field(repr=False)
    crown: Mapping[str, Any] = field(repr=False)
    petal: Mapping[str, Any] = field(repr=False)

    @classmethod
    def from_zones(
        cls,
        token: str,
        crown: Mapping[str, Any],
        petal: Mapping[str, Any],
    ) -> TokenPayload:
        iat = _as_int(crown.get("iat"))
        return cls(
            iss=crown.get("iss"),
            sub=crown.get("sub"),
            aud=crown.get("aud"),
            iat=iat,
            exp=_as_int(crown.get("exp")),
            nbf=_as_int(crown.get("nbf"), default=iat),
            jti=crown.get("jti") or "",
            alg=crown["alg"],
            typ=crown.get("typ") or "JPT",
            token=token,
            crown=MappingProxyType(dict(crown)),
            petal=MappingProxyType(dict(petal)),
        )

    def crown_claim(self, key: str, default: Any = None) -> Any:
        return self.crown.get(key, default)

    def petal_claim(self, key: str, default: Any = None) -> Any:
        return self.petal.get(key, default)

    def expires_in(self) -> int:
        """Seconds until ``exp``, never negative."""
        return max(0, self.exp - int(time.time()))
