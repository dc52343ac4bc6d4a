"""
ProductHub Backend — Refresh Session Model
============================================

What:  Persisted store of issued refresh tokens, keyed by the token's `jti`.
How:   Login inserts a row; POST /users/refreshToken requires a live row;
       logout deletes every row of the caller. Rows survive process restarts,
       so revocation is real rather than an in-memory list.

Access tokens are not recorded here; they stay stateless and expire on
their own TTL.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from producthub.database import Base


class UserSession(Base):
    """One issued refresh token."""

    __tablename__ = "user_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    token_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="jti claim of the refresh token",
    )

    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<UserSession(user_id={self.user_id}, token_id='{self.token_id}')>"
