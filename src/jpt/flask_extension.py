"""Flask extension protecting routes with JPT validation.

Security Model:
1. Extract token from request (header or cookie)
2. Run the validation pipeline (signature, digest, allow-lists, time window)
3. Store the TokenPayload in flask.g.jpt for route access
4. Optionally enforce a per-route predicate on the payload
5. Convert JPT errors to HTTP responses (401/403, 500 for key faults)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, Final, TypeAlias

from flask import Flask, abort, g

from .errors import Forbidden, JptError
from .extractors import DEFAULT_COOKIE, BearerExtractor, CookieExtractor

if TYPE_CHECKING:
    from .payload import TokenPayload
    from .protocols import Extractor, TokenVerifier, ViewFunc

logger = logging.getLogger(__name__)

_EXT_KEY: Final[str] = "jpt"
"""Flask extensions registry key for AuthExtension."""

PayloadCheck: TypeAlias = Callable[["TokenPayload"], bool]


class AuthExtension:
    """
    Flask decorator glue for JPT authentication.

    Responsibilities:
    - Extract token from request
    - Validate token (TokenVerifier, usually TokenValidator)
    - Store the validated payload in `flask.g.jpt`
    - Optionally run a route-specific check on the payload
    - Convert domain errors to HTTP responses (abort)

    Usage:
        auth = AuthExtension(TokenValidator(config))

        @app.get("/admin")
        @auth.require(check=lambda p: p.crown_claim("role") == "admin")
        def admin(): ...
    """

    def __init__(
        self,
        verifier: TokenVerifier | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        self._verifier: TokenVerifier | None = verifier
        self._extractor: Extractor = extractor or BearerExtractor()

    def init_app(
        self,
        app: Flask,
        *,
        verifier: TokenVerifier | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        """Register the extension on ``app``, optionally replacing collaborators."""
        if verifier is not None:
            self._verifier = verifier
        if extractor is not None:
            self._extractor = extractor

        app.extensions[_EXT_KEY] = self

    def _authenticate(self, check: PayloadCheck | None) -> TokenPayload:
        if self._verifier is None:
            raise RuntimeError("AuthExtension has no verifier; call init_app() first")

        token = self._extractor.extract()
        payload = self._verifier.verify(token)

        if check is not None and not check(payload):
            raise Forbidden()
        return payload

    def require(self, *, check: PayloadCheck | None = None):
        """Decorator to protect Flask routes with JPT validation.

        Error mapping:
        - ``MissingToken``      -> HTTP 401
        - ``InvalidToken``      -> HTTP 401 (any pipeline step)
        - ``Forbidden``         -> HTTP 403 (``check`` returned False)
        - ``SignerError``       -> HTTP 500 (key material / backend fault)
        - Any other Error       -> HTTP 401 ("Authentication failed")

        Args:
            check: Optional predicate run on the validated payload.

        Side Effects:
            - Writes the TokenPayload to ``flask.g.jpt`` before calling the view.
            - May terminate request handling early via ``flask.abort``.
        """

        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                try:
                    g.jpt = self._authenticate(check)
                except JptError as e:
                    abort(e.status_code, description=e.description)
                except Exception:
                    logger.exception("Unexpected error while authenticating request")
                    abort(401, description="Authentication failed")

                return view(*args, **kwargs)

            return wrapper

        return decorator


def get_verified_payload(
    verifier: TokenVerifier,
    *,
    cookie_name: str = DEFAULT_COOKIE,
) -> TokenPayload:
    """
    Return the validated payload of the JPT cookie on the current request.

    Aborts with the error's status (401, or 500 for key faults) when the
    cookie is missing, malformed or rejected.
    """
    try:
        return verifier.verify(CookieExtractor(cookie_name).extract())
    except JptError as e:
        abort(e.status_code, description=e.description)
    except Exception:
        logger.exception("Unexpected error while verifying cookie token")
        abort(401, description="Authentication failed")
