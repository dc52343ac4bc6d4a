"""
ProductHub Backend — Product SQLAlchemy Model
===============================================

What:  ORM model representing the `products` table.
Who:   Used by ProductService; every query filters on user_id.

Table Design:
    - user_id: owner, set once at creation and never updated
    - qty: integer stock count
    - product_image: generated filename inside STORAGE_ROOT (nullable)

Index on (user_id, id):
    Serves the owner-scoped listing (WHERE user_id = ? ORDER BY id) and the
    conditional mutations (WHERE id = ? AND user_id = ?).
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from producthub.database import Base


class Product(Base):
    """A product owned by exactly one user."""

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owner; immutable after creation",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    qty: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default=text("0"),
    )

    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    product_image: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        default=None,
        comment="Generated filename of the uploaded product image",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_products_user_id_id", "user_id", "id"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, user_id={self.user_id}, name='{self.name}')>"
