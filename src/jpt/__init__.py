"""
JPT: three-zone security tokens (crown.petal.thorn).

A JPT is a JWT-like token whose claims are split into a public zone and an
encrypted zone bound together by a digest:

- crown: URL-safe base64 JSON of public claims (iss, sub, aud, nbf, iat,
  exp, jti, alg, typ plus custom claims)
- petal: encrypted JSON of private claims, always carrying ``digest`` =
  SHA-256 of the canonical crown
- thorn: HS256/384/512 or RS256/384/512 signature over ``crown.petal``

High-level flow
---------------
Issue:  crown.build -> petal.build (digest + encrypt) -> thorn.sign -> join
Verify: split -> decode crown -> verify thorn -> decrypt petal -> digest ->
        issuer/audience allow-lists -> nbf/exp window -> TokenPayload

Security notes
--------------
- The signature is verified before the petal is ever decrypted.
- Reserved crown claims can only be set by the issuing configuration.
- Every failure raises a typed error with a stable numeric code.

Example usage
-------------

.. code-block:: python

    from jpt import Jpt, TokenConfig, AuthExtension

    jpt = Jpt(
        TokenConfig(
            secret="change-me",
            iss="auth.example.com",
            aud="orders",
            ttl=900,
        )
    )

    token = jpt.issue(crown={"role": "admin"}, petal={"uid": 42})
    payload = jpt.validate(token)

    # Protect Flask routes
    auth = AuthExtension(jpt.validator)

    @app.route("/admin")
    @auth.require(check=lambda p: p.crown_claim("role") == "admin")
    def admin_route():
        return {"uid": g.jpt.petal_claim("uid")}
"""

# Ciphers
from .ciphers import AesGcmCipher

# Configuration
from .config import ANY, TokenConfig

# Facade
from .core import Jpt

# Errors
from .errors import (
    AudienceNotAllowed,
    CryptoBackendError,
    DecodeError,
    DigestMismatch,
    ErrorCode,
    Expired,
    Forbidden,
    FormatError,
    InvalidToken,
    IssuerNotAllowed,
    JptError,
    KeyMaterialError,
    MissingField,
    MissingToken,
    NotYetValid,
    SignatureInvalid,
    SignerError,
    UnsupportedAlgorithm,
)

# Extractors
from .extractors import BearerExtractor, CookieExtractor

# Flask extension
from .flask_extension import AuthExtension, get_verified_payload

# Issuance
from .issuer import ClaimsDraft, TokenIssuer

# Payload
from .payload import TokenPayload

# Protocols
from .protocols import Cipher, Claims, Extractor, Signer, TokenVerifier, ViewFunc

# Signers
from .signers import SUPPORTED_ALGORITHMS, HmacSigner, RsaSigner, get_signer

# Validation
from .validator import TokenValidator

__all__ = [
    # Errors
    "JptError",
    "InvalidToken",
    "FormatError",
    "DecodeError",
    "MissingField",
    "UnsupportedAlgorithm",
    "SignatureInvalid",
    "DigestMismatch",
    "IssuerNotAllowed",
    "AudienceNotAllowed",
    "NotYetValid",
    "Expired",
    "MissingToken",
    "Forbidden",
    "SignerError",
    "KeyMaterialError",
    "CryptoBackendError",
    "ErrorCode",
    # Protocols
    "Cipher",
    "Claims",
    "Extractor",
    "Signer",
    "TokenVerifier",
    "ViewFunc",
    # Configuration
    "ANY",
    "TokenConfig",
    # Signers
    "SUPPORTED_ALGORITHMS",
    "HmacSigner",
    "RsaSigner",
    "get_signer",
    # Ciphers
    "AesGcmCipher",
    # Issuance / validation
    "ClaimsDraft",
    "TokenIssuer",
    "TokenValidator",
    "TokenPayload",
    "Jpt",
    # Extractors
    "BearerExtractor",
    "CookieExtractor",
    # Flask extension
    "AuthExtension",
    "get_verified_payload",
]
