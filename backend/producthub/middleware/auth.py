"""
ProductHub Backend — Bearer Authentication Guard
==================================================

What:  FastAPI dependency that turns an `Authorization: Bearer <token>`
       header into verified Claims.
How:   Header → scheme check → TokenService.verify(). Failures raise
       AuthError, which the global handler renders as a 401 envelope with
       `WWW-Authenticate: Bearer`.
Who:   Every protected route: `claims: Claims = Depends(require_auth)`.

States:
    NoToken ──header present──▶ ExtractingHeader ──"Bearer <t>"──▶ Verifying
       │                              │                               │
       └── missing ──▶ Rejected ◀── other scheme / empty ◀── invalid ─┤
                                                                      └──▶ Authenticated

The verified Claims are cached on request.state.claims. A second
application of the guard in the same request returns the cached claims
without verifying again, so stacking it on a router and a route is safe.
"""

import logging
from typing import Optional

from fastapi import Request

from producthub.exceptions import AuthError
from producthub.services.token_service import ACCESS, Claims, InvalidToken, TokenService, token_service

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"
MISSING_TOKEN_MESSAGE = "Token tidak ditemukan"


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Return the token part of a Bearer Authorization header.

    Raises:
        AuthError: header missing, wrong scheme, or empty token.
    """
    if not authorization:
        raise AuthError(message=MISSING_TOKEN_MESSAGE, context={"reason": "missing header"})

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        raise AuthError(context={"reason": "unsupported scheme"})

    token = token.strip()
    if not token:
        raise AuthError(message=MISSING_TOKEN_MESSAGE, context={"reason": "empty token"})
    return token


class BearerAuth:
    """Dependency object; one module-level instance is shared by all routes."""

    def __init__(self, tokens: Optional[TokenService] = None):
        self._tokens = tokens

    @property
    def tokens(self) -> TokenService:
        return self._tokens or token_service

    async def __call__(self, request: Request) -> Claims:
        cached = getattr(request.state, "claims", None)
        if isinstance(cached, Claims):
            return cached

        token = extract_bearer_token(request.headers.get("Authorization"))
        try:
            claims = self.tokens.verify(token, ACCESS)
        except InvalidToken as e:
            logger.info("Rejected bearer token on %s: %s", request.url.path, e)
            raise AuthError(context={"reason": str(e)})

        request.state.claims = claims
        return claims


require_auth = BearerAuth()
