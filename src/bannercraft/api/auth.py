"""Bearer-token authentication for the Bannercraft API.

Identity verification is delegated to a :class:`TokenVerifier`.  The
verifier turns an opaque bearer token into a stable user id, which the
request guard then uses as the rate-limit key.  The bundled
:class:`StaticTokenVerifier` reads a token -> user id map from configuration
(``BANNERCRAFT_AUTH_TOKENS``); a deployment backed by a real identity
provider supplies its own verifier on ``app.state.token_verifier``.
"""

from __future__ import annotations

import hmac
import logging
from abc import ABC, abstractmethod

from fastapi import Depends, Header, HTTPException, Request, status

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class InvalidToken(Exception):
    """The bearer token could not be verified."""


class TokenVerifier(ABC):
    """Resolves a bearer token to a user id."""

    @abstractmethod
    def verify(self, token: str) -> str:
        """Return the user id for *token*.

        Raises:
            InvalidToken: If the token is unknown, expired, or malformed.
        """


class StaticTokenVerifier(TokenVerifier):
    """Verifier backed by a fixed token -> user id mapping."""

    def __init__(self, tokens: dict[str, str]) -> None:
        self._tokens = dict(tokens)

    def verify(self, token: str) -> str:
        for known, user_id in self._tokens.items():
            if hmac.compare_digest(known.encode(), token.encode()):
                return user_id
        raise InvalidToken("Unknown token")


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def get_token_verifier(request: Request) -> TokenVerifier:
    """Return the verifier installed on ``app.state`` by the lifespan."""
    return request.app.state.token_verifier


def _verify(verifier: TokenVerifier, token: str) -> str:
    try:
        return verifier.verify(token)
    except InvalidToken:
        logger.warning("Token verification failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


async def get_current_user_id(
    authorization: str | None = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> str:
    """FastAPI dependency resolving the authenticated user id.

    Raises:
        HTTPException: 401 ``Unauthorized`` without a bearer token, 401
            ``Invalid token`` when the verifier rejects it.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return _verify(verifier, token)


async def get_optional_user_id(
    authorization: str | None = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> str | None:
    """Like :func:`get_current_user_id`, but anonymous requests yield None.

    A token that is present but invalid is still rejected with 401.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return None
    return _verify(verifier, token)
