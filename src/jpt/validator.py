"""Token validation pipeline.

Steps, strictly ordered, each a terminal failure
-------------------------------------------------
1. Split            exactly 3 segments                  FormatError (401001)
2. Decode crown     base64/JSON, ``alg`` present        DecodeError / MissingField
                    ``alg`` supported                   UnsupportedAlgorithm (401004)
                    ``alg`` family matches config       UnsupportedAlgorithm (401004)
3. Signature        thorn over crown.petal              SignatureInvalid (401005)
4. Decode petal     decrypt + JSON, ``digest`` present  DecodeError / MissingField
5. Digest           petal digest == SHA-256(crown)      DigestMismatch (401006)
6. Issuer           allow-list or "*"                   IssuerNotAllowed (401007)
7. Audience         allow-list or "*"                   AudienceNotAllowed (401008)
8. Not before       now + leeway >= nbf                 NotYetValid (401010)
9. Expiry           now < exp + leeway                  Expired (401012)

Security notes
--------------
- The signature is checked before the petal is decrypted, so forged tokens
  never reach the cipher with attacker-controlled ciphertext.
- Trust decisions (issuer, audience, time window) only happen on data that
  passed both the signature and the digest binding.
- Nothing is retried and no partial payload is returned.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from . import crown as crown_zone
from . import petal as petal_zone
from . import thorn
from .ciphers import AesGcmCipher
from .config import ANY
from .errors import (
    AudienceNotAllowed,
    DigestMismatch,
    Expired,
    FormatError,
    InvalidToken,
    IssuerNotAllowed,
    NotYetValid,
    SignatureInvalid,
    UnsupportedAlgorithm,
)
from .payload import TokenPayload
from .signers import SUPPORTED_ALGORITHMS, is_symmetric

if TYPE_CHECKING:
    from .config import TokenConfig
    from .protocols import Cipher, Crown

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def split_token(token: str) -> tuple[str, str, str]:
    """Split a token into crown, petal and thorn segments.

    Empty segments are kept; only the segment count is checked.

    Raises:
        FormatError: The token does not have exactly three segments.
    """
    if not isinstance(token, str):
        raise FormatError("Token must be a string")
    parts = token.split(".")
    if len(parts) != 3:
        raise FormatError()
    return parts[0], parts[1], parts[2]


class TokenValidator:
    """Validate JPTs against one immutable configuration.

    Implements the TokenVerifier protocol, so it plugs straight into
    AuthExtension.

    Thread Safety:
        Stateless apart from the frozen config and the cipher; safe for
        concurrent use with a thread-safe cipher.

    Example:
        ```python
        validator = TokenValidator(config)
        try:
            payload = validator.verify(raw_token)
        except Expired:
            ...  # prompt re-authentication
        except InvalidToken as e:
            log.info("rejected token: %s", e.code)
        ```
    """

    def __init__(self, config: TokenConfig, cipher: Cipher | None = None) -> None:
        self._config = config
        self._cipher = cipher or AesGcmCipher()

    @property
    def config(self) -> TokenConfig:
        return self._config

    def verify(self, token: str) -> TokenPayload:
        """Run the full pipeline and return the validated payload.

        Raises:
            InvalidToken: A subclass identifying the failing step.
            KeyMaterialError: Configured key material cannot be used.
            CryptoBackendError: The signature primitive failed internally.
        """
        try:
            return self._verify(token)
        except InvalidToken as e:
            logger.debug("Token rejected: %s (%s)", type(e).__name__, e.code)
            raise

    def _verify(self, token: str) -> TokenPayload:
        cfg = self._config

        crown_b64, petal_enc, signature = split_token(token)

        crown = crown_zone.decode(crown_b64)
        alg = crown["alg"]
        if not isinstance(alg, str) or alg not in SUPPORTED_ALGORITHMS:
            raise UnsupportedAlgorithm(f"Unsupported algorithm: {alg!r}")

        self._verify_signature(crown_b64, petal_enc, signature, alg)

        petal = petal_zone.decode(petal_enc, self._cipher, cfg.cipher_key)
        if not petal_zone.verify_digest(petal, crown):
            raise DigestMismatch()

        self._verify_claims(crown)

        return TokenPayload.from_zones(token, crown, petal)

    def _verify_signature(self, crown_b64: str, petal_enc: str, signature: str, alg: str) -> None:
        cfg = self._config
        if is_symmetric(alg) != is_symmetric(cfg.alg):
            # HS and RS keys never verify each other's tokens.
            raise UnsupportedAlgorithm(f"{alg} tokens are not accepted by a {cfg.alg} validator")

        # A missing key within the configured family is a KeyMaterialError.
        signer = cfg.signer_for(alg)
        key = cfg.verification_key_for(alg)
        if not thorn.verify(crown_b64, petal_enc, signature, signer, key):
            raise SignatureInvalid()

    def _verify_claims(self, crown: Crown) -> None:
        cfg = self._config

        issuers = cfg.accepted_issuers
        iss = crown.get("iss")
        if ANY not in issuers and (not isinstance(iss, str) or iss not in issuers):
            raise IssuerNotAllowed()

        audiences = cfg.accepted_audiences
        aud = crown.get("aud")
        if ANY not in audiences and (not isinstance(aud, str) or aud not in audiences):
            raise AudienceNotAllowed()

        now = time.time()

        nbf = crown.get("nbf")
        if _is_number(nbf) and now + cfg.leeway < nbf:
            raise NotYetValid()

        exp = crown.get("exp")
        if _is_number(exp) and now >= exp + cfg.leeway:
            raise Expired()
