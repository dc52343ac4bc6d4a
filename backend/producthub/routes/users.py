"""
ProductHub Backend — User Route Handlers
==========================================

What:  /users endpoints: registration, login, token refresh, logout, listing,
       profile, profile image, self-delete, filter and sort by email.
How:   Thin handlers: pull the body/upload/claims out of the request, call
       UserService, wrap the result in the response envelope.

filterEmail and sortByEmail read a JSON body on GET because existing
clients already send it that way.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from producthub.database import get_db_session
from producthub.middleware.auth import require_auth
from producthub.schemas.common import Envelope, ErrorResponse
from producthub.schemas.user import (
    AccessToken,
    FilterEmailRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    SortEmailRequest,
    TokenPair,
    UserList,
    UserResponse,
)
from producthub.services.file_service import file_service
from producthub.services.token_service import Claims
from producthub.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

ERRORS = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
AUTH_ERRORS = {
    **ERRORS,
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
}


@router.post(
    "/add",
    response_model=Envelope[None],
    responses=ERRORS,
    summary="Register a new user",
)
async def register(
    payload: Optional[RegisterRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    payload = payload or RegisterRequest()
    await user_service.register(
        db,
        email=payload.email,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return Envelope[None](message="Registrasi berhasil")


@router.post(
    "/login",
    response_model=Envelope[TokenPair],
    responses={**ERRORS, 401: {"description": "Bad credentials", "model": ErrorResponse}},
    summary="Log in and receive an access/refresh token pair",
)
async def login(
    payload: Optional[LoginRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[TokenPair]:
    payload = payload or LoginRequest()
    pair = await user_service.login(db, email=payload.email, password=payload.password)
    return Envelope[TokenPair](message="Login Sukses", data=pair)


@router.post(
    "/refreshToken",
    response_model=Envelope[AccessToken],
    responses={**ERRORS, 401: {"description": "Invalid or revoked refresh token", "model": ErrorResponse}},
    summary="Exchange a refresh token for a new access token",
)
async def refresh_token(
    payload: Optional[RefreshRequest] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[AccessToken]:
    payload = payload or RefreshRequest()
    token = await user_service.refresh(db, payload.refresh_token)
    return Envelope[AccessToken](message="Refresh Token Sukses", data=token)


@router.post(
    "/logout",
    response_model=Envelope[None],
    responses=AUTH_ERRORS,
    summary="Revoke every refresh session of the caller",
)
async def logout(
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await user_service.logout(db, claims)
    return Envelope[None](message="Logout Sukses")


@router.get(
    "/getAll",
    response_model=Envelope[UserList],
    responses=AUTH_ERRORS,
    summary="List all users",
)
async def get_all_users(
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserList]:
    users = await user_service.list_users(db)
    return Envelope[UserList](message="Success Get All Users", data=users)


@router.get(
    "/profile",
    response_model=Envelope[UserResponse],
    responses={**AUTH_ERRORS, 404: {"description": "Account no longer exists", "model": ErrorResponse}},
    summary="Current user's profile",
)
async def get_profile(
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserResponse]:
    profile = await user_service.get_profile(db, claims)
    return Envelope[UserResponse](message="Success Get Profile", data=profile)


@router.patch(
    "/updateProfileImage",
    response_model=Envelope[UserResponse],
    responses={**AUTH_ERRORS, 404: {"description": "Account no longer exists", "model": ErrorResponse}},
    summary="Upload a new profile image (JPEG or PNG)",
)
async def update_profile_image(
    image: Optional[UploadFile] = File(default=None, description="JPEG or PNG image"),
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserResponse]:
    content = await file_service.read_upload(image)
    profile = await user_service.update_profile_image(
        db,
        claims,
        filename=image.filename if image is not None else None,
        content_type=image.content_type if image is not None else None,
        content=content,
    )
    return Envelope[UserResponse](message="Update Profile Image berhasil", data=profile)


@router.delete(
    "/delete",
    response_model=Envelope[None],
    responses={**AUTH_ERRORS, 404: {"description": "Account already deleted", "model": ErrorResponse}},
    summary="Delete the caller's own account",
)
async def delete_user(
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await user_service.delete_user(db, claims)
    return Envelope[None](message="Delete Profile berhasil")


@router.get(
    "/filterEmail",
    response_model=Envelope[UserList],
    responses=AUTH_ERRORS,
    summary="Users whose email belongs to a provider (gmail or yahoo)",
)
async def filter_email(
    payload: Optional[FilterEmailRequest] = Body(default=None),
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserList]:
    payload = payload or FilterEmailRequest()
    users = await user_service.filter_by_provider(db, payload.email)
    return Envelope[UserList](message="Filter Berhasil", data=users)


@router.get(
    "/sortByEmail",
    response_model=Envelope[UserList],
    responses=AUTH_ERRORS,
    summary="All users sorted by email",
)
async def sort_by_email(
    payload: Optional[SortEmailRequest] = Body(default=None),
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[UserList]:
    payload = payload or SortEmailRequest()
    users = await user_service.sort_by_email(db, payload.sort_type)
    return Envelope[UserList](message="Sort Berhasil", data=users)
