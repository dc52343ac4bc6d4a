"""
ProductHub Backend — User Service
===================================

What:  Registration, login, refresh/logout, profile image, self-delete and
       the two user listing helpers (filter by provider, sort by email).
How:   Each method validates input, then performs its data operation with a
       keyed statement. Errors surface as ProductHubError subclasses; raw
       SQLAlchemy errors are logged and wrapped in DatabaseError.
Who:   Called by routes/users.py.

Identity:
    Every authenticated method receives the verified Claims; the subject id
    is the only key used to touch the caller's own row. There is no
    target-id parameter for delete or image update.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import asc, delete, desc, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from producthub.config import settings
from producthub.exceptions import (
    AuthError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from producthub.models import Product, User, UserSession
from producthub.schemas.user import AccessToken, TokenPair, UserResponse
from producthub.services import passwords
from producthub.services.file_service import file_service
from producthub.services.token_service import Claims, InvalidToken, token_service
from producthub.services.validators import is_blank, validate_email, validate_password

logger = logging.getLogger(__name__)

INVALID_EMAIL_MESSAGE = "Parameter email tidak sesuai format"
INVALID_CREDENTIALS_MESSAGE = "Username atau password salah"
USER_NOT_FOUND_MESSAGE = "User tidak ditemukan"


def password_message() -> str:
    return f"Password minimal {settings.password_min_length} karakter"


def claims_for(user: User) -> Claims:
    return Claims(
        user_id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        profile_image=user.profile_image,
    )


class UserService:
    """
    Business logic for user accounts.

    Responsibilities:
        - register() / login() / refresh() / logout()
        - list_users() / get_profile()
        - update_profile_image() / delete_user()
        - filter_by_provider() / sort_by_email()
    """

    # ── Credentials ───────────────────────────────────────────────────────

    def _check_credentials_shape(self, email: Optional[str], password: Optional[str]) -> None:
        if not validate_email(email, settings.allowed_email_domains_list):
            raise ValidationError(message=INVALID_EMAIL_MESSAGE, field="email")
        if not validate_password(password, settings.password_min_length):
            raise ValidationError(message=password_message(), field="password")

    async def register(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
    ) -> None:
        """
        Create an account with a bcrypt-hashed password.

        Raises:
            ValidationError: bad email/password shape, blank names
            ConflictError:   email already registered (unique constraint)
        """
        self._check_credentials_shape(email, password)
        if is_blank(first_name) or is_blank(last_name):
            raise ValidationError(
                message="First name dan last name tidak boleh kosong",
                field="first_name" if is_blank(first_name) else "last_name",
            )

        password_hash = await passwords.hash_password_async(password)
        user = User(
            email=email.lower(),
            password_hash=password_hash,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
        )
        try:
            db.add(user)
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(message="Email sudah terdaftar", field="email")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "register"})

        logger.info("User registered: id=%s", user.id)

    async def login(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
    ) -> TokenPair:
        """
        Check credentials and mint an access/refresh pair.

        The refresh token's jti is persisted in user_sessions so it can be
        revoked at logout.

        Raises:
            ValidationError: bad email/password shape
            AuthError:       unknown email or wrong password (same message)
        """
        self._check_credentials_shape(email, password)

        try:
            result = await db.execute(select(User).where(User.email == email.lower()))
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "login"})

        if user is None or not await passwords.check_password_async(password, user.password_hash):
            logger.info("Login rejected for email domain=%s", email.rsplit("@", 1)[-1])
            raise AuthError(message=INVALID_CREDENTIALS_MESSAGE)

        pair = token_service.issue_pair(claims_for(user))
        try:
            db.add(
                UserSession(
                    user_id=user.id,
                    token_id=pair.refresh_token_id,
                    expires_at=pair.refresh_expires_at,
                )
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error storing session: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "login", "user_id": user.id})

        logger.info("User %s logged in", user.id)
        return TokenPair(token=pair.access_token, refresh_token=pair.refresh_token)

    async def refresh(self, db: AsyncSession, refresh_token: Optional[str]) -> AccessToken:
        """
        Exchange a live refresh token for a new access token.

        The session row must still exist and be unexpired; claims are rebuilt
        from the current user row so profile changes show up in new tokens.
        """
        if is_blank(refresh_token):
            raise ValidationError(message="Parameter refreshToken tidak boleh kosong", field="refreshToken")
        try:
            claims, token_id = token_service.verify_refresh(refresh_token)
        except InvalidToken as e:
            raise AuthError(context={"reason": str(e)})

        try:
            result = await db.execute(
                select(User)
                .join(UserSession, UserSession.user_id == User.id)
                .where(
                    UserSession.token_id == token_id,
                    UserSession.user_id == claims.user_id,
                    UserSession.expires_at > datetime.now(timezone.utc),
                )
            )
            user = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error during refresh: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "refresh"})

        if user is None:
            raise AuthError(message="Sesi sudah berakhir, silakan login kembali")

        return AccessToken(token=token_service.issue(claims_for(user), token_service.access_ttl))

    async def logout(self, db: AsyncSession, claims: Claims) -> int:
        """
        Revoke every refresh session of the caller.

        Access tokens already issued stay valid until they expire.

        Returns:
            Number of sessions removed.
        """
        try:
            result = await db.execute(
                delete(UserSession).where(UserSession.user_id == claims.user_id)
            )
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error during logout: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "logout", "user_id": claims.user_id})

        logger.info("User %s logged out (%d sessions revoked)", claims.user_id, result.rowcount)
        return result.rowcount

    # ── Reads ─────────────────────────────────────────────────────────────

    async def _fetch_users(self, db: AsyncSession, query, operation: str) -> List[UserResponse]:
        try:
            result = await db.execute(query)
            return [UserResponse.model_validate(u) for u in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error in %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(context={"operation": operation})

    async def list_users(self, db: AsyncSession) -> List[UserResponse]:
        return await self._fetch_users(db, select(User).order_by(User.id), "list_users")

    async def get_profile(self, db: AsyncSession, claims: Claims) -> UserResponse:
        users = await self._fetch_users(
            db, select(User).where(User.id == claims.user_id), "get_profile"
        )
        if not users:
            raise NotFoundError(resource="user", message=USER_NOT_FOUND_MESSAGE)
        return users[0]

    async def filter_by_provider(self, db: AsyncSession, provider: Optional[str]) -> List[UserResponse]:
        """
        Users whose email domain starts with the given provider name
        (e.g. "gmail" matches "@gmail.com" and "@gmail.co.id").
        """
        if is_blank(provider):
            raise ValidationError(message="Parameter email tidak boleh kosong", field="email")

        providers = settings.email_filter_providers_list
        provider = provider.strip().lower()
        if provider not in providers:
            raise ValidationError(
                message=f"Format Email Tidak Valid, masukkan {' atau '.join(providers)}",
                field="email",
                context={"allowed": providers},
            )

        query = select(User).where(User.email.like(f"%@{provider}.%")).order_by(User.id)
        return await self._fetch_users(db, query, "filter_by_provider")

    async def sort_by_email(self, db: AsyncSession, sort_type: Optional[str]) -> List[UserResponse]:
        if is_blank(sort_type):
            raise ValidationError(message="Parameter sortType tidak boleh kosong", field="sortType")

        direction = sort_type.strip().lower()
        if direction not in {"asc", "desc"}:
            raise ValidationError(message="Masukkan asc atau desc", field="sortType")

        order = asc(User.email) if direction == "asc" else desc(User.email)
        query = select(User).order_by(order, User.id)
        return await self._fetch_users(db, query, "sort_by_email")

    # ── Mutations ─────────────────────────────────────────────────────────

    async def update_profile_image(
        self,
        db: AsyncSession,
        claims: Claims,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
    ) -> UserResponse:
        """
        Store a new profile image and point the caller's row at it.

        Workflow:
            1. Validate + store the file (400 on missing/bad MIME/size)
            2. Lock the caller's row and read the current image name
            3. UPDATE users SET profile_image WHERE id = :sub
            4. Commit, then remove the replaced file

        On a missing row or DB failure the newly stored file is removed.
        """
        new_name = await file_service.validate_and_store(filename, content_type, content)

        try:
            result = await db.execute(
                select(User.profile_image).where(User.id == claims.user_id).with_for_update()
            )
            row = result.one_or_none()
            if row is None:
                raise NotFoundError(resource="user", message=USER_NOT_FOUND_MESSAGE)
            previous = row.profile_image

            updated = await db.execute(
                update(User)
                .where(User.id == claims.user_id)
                .values(profile_image=new_name)
                .execution_options(synchronize_session=False)
            )
            if updated.rowcount == 0:
                raise NotFoundError(resource="user", message=USER_NOT_FOUND_MESSAGE)

            result = await db.execute(select(User).where(User.id == claims.user_id))
            profile = UserResponse.model_validate(result.scalar_one())
            await db.commit()
        except NotFoundError:
            await db.rollback()
            await file_service.cleanup_file(new_name)
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            await file_service.cleanup_file(new_name)
            logger.error("Database error updating profile image: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "update_profile_image", "user_id": claims.user_id})

        if previous and previous != new_name:
            await file_service.cleanup_file(previous)

        logger.info("User %s profile image set to %s", claims.user_id, new_name)
        return profile

    async def delete_user(self, db: AsyncSession, claims: Claims) -> None:
        """
        Delete the caller together with their products and sessions.

        All three deletes run in one transaction; stored images are removed
        after the commit.
        """
        uid = claims.user_id
        try:
            images = await db.execute(select(User.profile_image).where(User.id == uid))
            product_images = await db.execute(
                select(Product.product_image).where(Product.user_id == uid)
            )
            filenames = [name for name in images.scalars().all() if name]
            filenames += [name for name in product_images.scalars().all() if name]

            await db.execute(delete(Product).where(Product.user_id == uid))
            await db.execute(delete(UserSession).where(UserSession.user_id == uid))
            deleted = await db.execute(delete(User).where(User.id == uid))
            if deleted.rowcount == 0:
                raise NotFoundError(resource="user", message=USER_NOT_FOUND_MESSAGE)
            await db.commit()
        except NotFoundError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error deleting user %s: %s", uid, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "delete_user", "user_id": uid})

        for name in filenames:
            await file_service.cleanup_file(name)
        logger.info("User %s deleted", uid)


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
