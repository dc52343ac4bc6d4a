"""
ProductHub Backend — Token Service
====================================

What:  Issues and verifies signed session tokens carrying identity claims.
How:   PyJWT with a process-wide HMAC secret. Verification is stateless:
       signature, structure, expiry and token type are checked locally.
Who:   UserService mints tokens at login/refresh; the auth guard verifies
       access tokens on every protected request.

Token classes:
    access   short-lived (settings.access_token_ttl_minutes), required on
             protected routes
    refresh  long-lived (settings.refresh_token_ttl_days), carries a `jti`
             that must exist in the user_sessions table to be redeemed

Payload layout:
    {
        "sub": "42",                 # user id, string form as JWT requires
        "email": "a@gmail.com",
        "first_name": "Ana",
        "last_name": "Putri",
        "profile_image": null,
        "typ": "access",
        "iat": 1700000000,
        "exp": 1700003600,
        "jti": "..."                 # refresh tokens only
    }
"""

import logging
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

import jwt

from producthub.config import settings

logger = logging.getLogger(__name__)

ACCESS = "access"
REFRESH = "refresh"


class InvalidToken(Exception):
    """Signature mismatch, malformed token, missing claims, expiry or wrong type."""


@dataclass(frozen=True)
class Claims:
    """Identity attributes embedded in a token."""

    user_id: int
    email: str
    first_name: str = ""
    last_name: str = ""
    profile_image: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["sub"] = str(payload.pop("user_id"))
        return payload


@dataclass(frozen=True)
class IssuedPair:
    """Result of a login: both tokens plus what the session store needs."""

    access_token: str
    refresh_token: str
    refresh_token_id: str
    refresh_expires_at: datetime


class TokenService:
    """
    Stateless JWT issuer/verifier.

    The secret and algorithm default to the application settings; tests pass
    their own so they never depend on the environment.
    """

    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_ttl: Optional[timedelta] = None,
        refresh_ttl: Optional[timedelta] = None,
    ):
        self._secret = secret or settings.jwt_secret
        self._algorithm = algorithm or settings.jwt_algorithm
        self.access_ttl = access_ttl or timedelta(minutes=settings.access_token_ttl_minutes)
        self.refresh_ttl = refresh_ttl or timedelta(days=settings.refresh_token_ttl_days)

    def issue(
        self,
        claims: Claims,
        ttl: timedelta,
        token_type: str = ACCESS,
        token_id: Optional[str] = None,
    ) -> str:
        """
        Encode `claims` into a signed token that expires after `ttl`.

        Returns:
            Compact JWT string.
        """
        now = datetime.now(timezone.utc)
        payload = claims.to_payload()
        payload.update(typ=token_type, iat=now, exp=now + ttl)
        if token_id:
            payload["jti"] = token_id
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue_pair(self, claims: Claims) -> IssuedPair:
        """Mint the access/refresh pair handed out at login."""
        token_id = uuid.uuid4().hex
        expires_at = datetime.now(timezone.utc) + self.refresh_ttl
        return IssuedPair(
            access_token=self.issue(claims, self.access_ttl, ACCESS),
            refresh_token=self.issue(claims, self.refresh_ttl, REFRESH, token_id=token_id),
            refresh_token_id=token_id,
            refresh_expires_at=expires_at,
        )

    def decode(self, token: str, token_type: str = ACCESS) -> Dict[str, Any]:
        """
        Verify `token` and return its raw payload.

        Raises:
            InvalidToken: for any verification failure. The PyJWT reason is
                kept as the message for server-side logs.
        """
        if not token:
            raise InvalidToken("empty token")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", "sub", "typ"]},
            )
        except jwt.PyJWTError as e:
            logger.debug("Token rejected: %s", e)
            raise InvalidToken(str(e)) from e

        if payload.get("typ") != token_type:
            raise InvalidToken(f"expected {token_type} token, got {payload.get('typ')!r}")
        if token_type == REFRESH and not payload.get("jti"):
            raise InvalidToken("refresh token without jti")
        return payload

    def verify(self, token: str, token_type: str = ACCESS) -> Claims:
        """
        Verify `token` and rebuild the identity claims it carries.

        Raises:
            InvalidToken: bad signature, malformed, expired, wrong type, or a
                subject that is not an integer id.
        """
        return self._claims_from(self.decode(token, token_type))

    def verify_refresh(self, token: str) -> Tuple[Claims, str]:
        """Verify a refresh token; returns its claims and `jti`."""
        payload = self.decode(token, REFRESH)
        return self._claims_from(payload), payload["jti"]

    @staticmethod
    def _claims_from(payload: Dict[str, Any]) -> Claims:
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidToken("subject is not a user id") from e

        return Claims(
            user_id=user_id,
            email=payload.get("email", ""),
            first_name=payload.get("first_name", ""),
            last_name=payload.get("last_name", ""),
            profile_image=payload.get("profile_image"),
        )


token_service = TokenService()
