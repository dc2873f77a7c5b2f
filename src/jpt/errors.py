"""Token issuance and validation errors.

This module defines the exception hierarchy for JPT failures. All errors
inherit from JptError to allow catch-all error handling.

Every validation failure carries a stable numeric ``code`` (see ErrorCode).
The codes are part of the wire contract with other JPT implementations and
must never be renumbered.

Security Note:
    Error messages are intentionally generic to avoid leaking implementation
    details. Detailed logs should be written server-side, not returned to clients.
"""

from __future__ import annotations

from enum import IntEnum
from typing import ClassVar


class ErrorCode(IntEnum):
    """Stable error codes shared with other JPT implementations."""

    MALFORMED_TOKEN = 401001
    INVALID_CROWN = 401002
    INVALID_PETAL = 401003
    UNSUPPORTED_ALGORITHM = 401004
    SIGNATURE_INVALID = 401005
    DIGEST_MISMATCH = 401006
    ISSUER_NOT_ALLOWED = 401007
    AUDIENCE_NOT_ALLOWED = 401008
    NOT_YET_VALID = 401010
    EXPIRED = 401012
    DECODE_FAILURE = 401013


class JptError(Exception):
    """Base exception for all JPT failures.

    Application code can catch this single exception type to handle any
    token failure generically.

    Attributes:
        code: Stable error code, or None for errors that are not token faults.
        status_code: HTTP status the Flask integration answers with.
    """

    code: ClassVar[ErrorCode | None] = None
    status_code: ClassVar[int] = 401
    default_message: ClassVar[str] = "Token error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def description(self) -> str:
        """Client-facing message (the exception message)."""
        return str(self)


class MissingToken(JptError):  # noqa: N818
    """Raised when no token is found in the request.

    This occurs when:
    - The Authorization header is missing or not "Bearer <token>"
    - The configured cookie is missing
    """

    default_message = "Missing token"


class Forbidden(JptError):  # noqa: N818
    """Raised when a valid token does not satisfy a route's requirements.

    This is the only error that should result in 403. All token faults are 401.
    """

    status_code = 403
    default_message = "Forbidden"


class InvalidToken(JptError):  # noqa: N818
    """Raised when a token is present but fails validation.

    Subclasses identify the exact pipeline step that rejected the token.
    Treat all of them identically from a security perspective; the
    distinction helps with metrics and debugging.
    """

    default_message = "Invalid token"


class FormatError(InvalidToken):
    """Token is not made of exactly three dot-separated segments."""

    code = ErrorCode.MALFORMED_TOKEN
    default_message = "Malformed token"


class DecodeError(InvalidToken):
    """Base64, JSON or cipher decoding of a segment failed."""

    code = ErrorCode.DECODE_FAILURE
    default_message = "Unable to decode token data"


class MissingField(InvalidToken):  # noqa: N818
    """A required reserved field is absent from the crown or the petal.

    The code depends on the zone: INVALID_CROWN for a crown without ``alg``,
    INVALID_PETAL for a petal without ``digest``.
    """

    code = ErrorCode.INVALID_CROWN
    default_message = "Missing required field"

    def __init__(self, field: str, *, zone: str = "crown") -> None:
        super().__init__(f"Invalid {zone} data: missing '{field}'")
        self.field = field
        self.zone = zone
        if zone == "petal":
            self.code = ErrorCode.INVALID_PETAL


class UnsupportedAlgorithm(InvalidToken):  # noqa: N818
    """Algorithm tag is not one of the supported HS*/RS* algorithms."""

    code = ErrorCode.UNSUPPORTED_ALGORITHM
    default_message = "Unsupported algorithm"


class SignatureInvalid(InvalidToken):  # noqa: N818
    """The thorn does not match the crown and petal segments."""

    code = ErrorCode.SIGNATURE_INVALID
    default_message = "Token signature verification failed"


class DigestMismatch(InvalidToken):  # noqa: N818
    """The petal digest does not match the crown it travels with."""

    code = ErrorCode.DIGEST_MISMATCH
    default_message = "Token data verification failed (digest mismatch)"


class IssuerNotAllowed(InvalidToken):  # noqa: N818
    code = ErrorCode.ISSUER_NOT_ALLOWED
    default_message = "Token issuer is not allowed"


class AudienceNotAllowed(InvalidToken):  # noqa: N818
    code = ErrorCode.AUDIENCE_NOT_ALLOWED
    default_message = "Token audience is not allowed"


class NotYetValid(InvalidToken):  # noqa: N818
    code = ErrorCode.NOT_YET_VALID
    default_message = "Token is not yet valid"


class Expired(InvalidToken):  # noqa: N818
    """Raised when a token's exp claim has passed (leeway included).

    Typically prompts the client to obtain a new token.
    """

    code = ErrorCode.EXPIRED
    default_message = "Token has expired"


class SignerError(JptError):
    """Base class for key material and crypto backend faults.

    These are deployment problems rather than bad tokens, so the Flask
    integration answers them with 500.
    """

    status_code = 500
    default_message = "Signing backend error"


class KeyMaterialError(SignerError):
    """Key material is missing or cannot be parsed."""

    default_message = "Invalid or missing key material"


class CryptoBackendError(SignerError):
    """The underlying primitive failed for a reason other than a bad signature."""

    default_message = "Cryptographic backend failure"
