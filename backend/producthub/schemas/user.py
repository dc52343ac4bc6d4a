"""
ProductHub Backend — User Request/Response Schemas
====================================================

Request fields are optional at the schema level on purpose: a missing email
or password must produce the same 400 message as a malformed one, which the
service layer decides, instead of FastAPI's generic 422.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    """Body of POST /users/add."""

    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class LoginRequest(BaseModel):
    """Body of POST /users/login."""

    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(BaseModel):
    """Body of POST /users/refreshToken."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")


class FilterEmailRequest(BaseModel):
    """Body of GET /users/filterEmail, e.g. {"email": "gmail"}."""

    email: Optional[str] = None


class SortEmailRequest(BaseModel):
    """Body of GET /users/sortByEmail, e.g. {"sortType": "asc"}."""

    model_config = ConfigDict(populate_by_name=True)

    sort_type: Optional[str] = Field(default=None, alias="sortType")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserResponse(BaseModel):
    """Public view of a user; the password hash is never part of it."""

    id: int
    email: str
    first_name: str
    last_name: str
    profile_image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TokenPair(BaseModel):
    """Payload of a successful login."""

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(description="Access token for the Authorization header")
    refresh_token: str = Field(
        alias="refreshToken",
        description="Long-lived token accepted by POST /users/refreshToken",
    )


class AccessToken(BaseModel):
    """Payload of a successful refresh."""

    token: str


UserList = List[UserResponse]
