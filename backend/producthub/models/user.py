"""
ProductHub Backend — User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table.
Who:   Used by UserService for registration, login, profile image updates
       and self-service deletion.

Table Design:
    - id: integer primary key, also the `sub` claim of issued tokens
    - email: unique; login looks rows up by this column
    - password_hash: bcrypt hash, never the cleartext password
    - profile_image: generated filename inside STORAGE_ROOT (nullable)
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from producthub.database import Base


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created by POST /users/add
        2. profile_image replaced by PATCH /users/updateProfileImage
        3. Deleted by DELETE /users/delete (the caller only)

    Query Patterns:
        - Login: SELECT ... WHERE email = :email → unique index
        - Keyed update/delete: WHERE id = :sub → primary key
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
        comment="Login identifier; unique across accounts",
    )

    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the account password",
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    last_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    profile_image: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Generated filename of the uploaded profile image",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
