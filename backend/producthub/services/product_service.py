"""
ProductHub Backend — Product Service
======================================

What:  Owner-scoped create, list, search, partial update, delete and image
       update for products.
How:   Every read is a keyed lookup (`WHERE id = ? AND user_id = ?`). Every
       mutation is a single conditional statement whose affected-row count is
       checked; when it is 0, a keyed probe by id tells "no such product"
       (400) apart from "someone else's product" (403).
Who:   Called by routes/products.py.

Classification of a 0-row mutation:

    UPDATE/DELETE ... WHERE id = :id AND user_id = :sub   → rowcount
        │
        ├─ 1 → success
        └─ 0 → SELECT user_id FROM products WHERE id = :id
                 ├─ no row       → NotFoundError (400 "Product ID Tidak Ditemukan")
                 └─ other owner  → AuthorizationError (403)

    The probe only picks the error to report; it never authorizes a write.
    A product deleted between two requests therefore yields not-found rather
    than a reported success.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from producthub.exceptions import (
    AuthorizationError,
    DatabaseError,
    NotFoundError,
    ProductHubError,
    ValidationError,
)
from producthub.models import Product
from producthub.schemas.product import ProductResponse
from producthub.services.file_service import file_service
from producthub.services.token_service import Claims
from producthub.services.validators import is_blank

logger = logging.getLogger(__name__)

PRODUCT_NOT_FOUND_MESSAGE = "Product ID Tidak Ditemukan"
REQUIRED_FIELDS_MESSAGE = "Name, qty, dan description tidak boleh kosong"
OFFSET_WITHOUT_LIMIT_MESSAGE = (
    "Apabila ingin menggunakan offset, limit harus diisi lebih besar dari 0"
)


def product_not_found(product_id: Optional[int]) -> NotFoundError:
    return NotFoundError(
        resource="product",
        resource_id=product_id,
        message=PRODUCT_NOT_FOUND_MESSAGE,
        status_code=400,
    )


class ProductService:
    """
    Business logic for products.

    Responsibilities:
        - create(): insert owned by the caller
        - list_products(): owner-scoped listing with limit/offset rules
        - search(): keyed lookup of one product
        - update() / delete() / update_image(): conditional mutations
    """

    @staticmethod
    def _check_qty(qty: Optional[int]) -> None:
        if qty is not None and qty < 0:
            raise ValidationError(message="Qty tidak boleh negatif", field="qty")

    async def _classify_missing(self, db: AsyncSession, product_id: int, claims: Claims) -> ProductHubError:
        """Explain why a conditional mutation touched no row."""
        result = await db.execute(select(Product.user_id).where(Product.id == product_id))
        owner_id = result.scalar_one_or_none()
        if owner_id is None:
            return product_not_found(product_id)

        logger.warning(
            "User %s attempted to modify product %s owned by %s",
            claims.user_id,
            product_id,
            owner_id,
        )
        return AuthorizationError(context={"product_id": product_id})

    async def _get_owned(self, db: AsyncSession, product_id: int, claims: Claims) -> Optional[Product]:
        result = await db.execute(
            select(Product)
            .where(Product.id == product_id, Product.user_id == claims.user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    # ── Create / Read ─────────────────────────────────────────────────────

    async def create(
        self,
        db: AsyncSession,
        claims: Claims,
        name: Optional[str],
        qty: Optional[int],
        description: Optional[str],
    ) -> ProductResponse:
        if is_blank(name) or qty is None or is_blank(description):
            raise ValidationError(message=REQUIRED_FIELDS_MESSAGE)
        self._check_qty(qty)

        product = Product(
            user_id=claims.user_id,
            name=name.strip(),
            qty=qty,
            description=description.strip(),
        )
        try:
            db.add(product)
            await db.commit()
            await db.refresh(product)
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error creating product: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "create_product", "user_id": claims.user_id})

        logger.info("Product %s created by user %s", product.id, claims.user_id)
        return ProductResponse.model_validate(product)

    async def list_products(
        self,
        db: AsyncSession,
        claims: Claims,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[ProductResponse]:
        """
        List the caller's products ordered by id.

        Pagination rules:
            limit > 0                → at most `limit` rows, skipping `offset`
            limit absent or 0, no offset (or 0) → every row
            offset > 0 without a positive limit → 400
            negative limit or offset → 400
        """
        limit = limit or 0
        offset = offset or 0
        if limit < 0 or offset < 0:
            raise ValidationError(
                message="Limit dan offset tidak boleh negatif",
                field="limit" if limit < 0 else "offset",
            )
        if offset > 0 and limit == 0:
            raise ValidationError(message=OFFSET_WITHOUT_LIMIT_MESSAGE, field="offset")

        query = select(Product).where(Product.user_id == claims.user_id).order_by(Product.id)
        if limit > 0:
            query = query.limit(limit).offset(offset)

        try:
            result = await db.execute(query)
            return [ProductResponse.model_validate(p) for p in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing products: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "list_products", "user_id": claims.user_id})

    async def search(self, db: AsyncSession, claims: Claims, product_id: Optional[int]) -> ProductResponse:
        if product_id is None:
            raise ValidationError(message="Parameter id tidak boleh kosong", field="id")
        try:
            product = await self._get_owned(db, product_id, claims)
        except SQLAlchemyError as e:
            logger.error("Database error searching product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "search_product", "product_id": product_id})

        if product is None:
            raise product_not_found(product_id)
        return ProductResponse.model_validate(product)

    # ── Mutations ─────────────────────────────────────────────────────────

    async def update(
        self,
        db: AsyncSession,
        claims: Claims,
        product_id: Optional[int],
        name: Optional[str] = None,
        qty: Optional[int] = None,
        description: Optional[str] = None,
    ) -> ProductResponse:
        """
        Partial update: absent or blank fields keep their stored value.

        With nothing to change the call still checks that the product exists
        and belongs to the caller, then returns it unchanged.
        """
        if product_id is None:
            raise ValidationError(message="Parameter id tidak boleh kosong", field="id")
        self._check_qty(qty)

        values: Dict[str, object] = {}
        if not is_blank(name):
            values["name"] = name.strip()
        if qty is not None:
            values["qty"] = qty
        if not is_blank(description):
            values["description"] = description.strip()

        try:
            if values:
                result = await db.execute(
                    update(Product)
                    .where(Product.id == product_id, Product.user_id == claims.user_id)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount == 0:
                    raise await self._classify_missing(db, product_id, claims)

            product = await self._get_owned(db, product_id, claims)
            if product is None:
                raise await self._classify_missing(db, product_id, claims)
            await db.commit()
        except ProductHubError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error updating product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "update_product", "product_id": product_id})

        if values:
            logger.info("Product %s updated by user %s: %s", product_id, claims.user_id, sorted(values))
        return ProductResponse.model_validate(product)

    async def delete(self, db: AsyncSession, claims: Claims, product_id: Optional[int]) -> None:
        if product_id is None:
            raise ValidationError(message="Parameter id tidak boleh kosong", field="id")

        try:
            image = await db.execute(
                select(Product.product_image).where(
                    Product.id == product_id, Product.user_id == claims.user_id
                )
            )
            previous = image.scalar_one_or_none()

            result = await db.execute(
                delete(Product)
                .where(Product.id == product_id, Product.user_id == claims.user_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise await self._classify_missing(db, product_id, claims)
            await db.commit()
        except ProductHubError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Database error deleting product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "delete_product", "product_id": product_id})

        await file_service.cleanup_file(previous)
        logger.info("Product %s deleted by user %s", product_id, claims.user_id)

    async def update_image(
        self,
        db: AsyncSession,
        claims: Claims,
        product_id: Optional[int],
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
    ) -> ProductResponse:
        """
        Store a new product image and record it with a conditional UPDATE.

        The file is validated before any database work. If the UPDATE touches
        no row the freshly stored file is removed and the error classified;
        on success the replaced file is removed.
        """
        if product_id is None:
            raise ValidationError(message="Parameter id tidak boleh kosong", field="id")

        new_name = await file_service.validate_and_store(filename, content_type, content)

        try:
            image = await db.execute(
                select(Product.product_image)
                .where(Product.id == product_id, Product.user_id == claims.user_id)
                .with_for_update()
            )
            previous = image.scalar_one_or_none()

            result = await db.execute(
                update(Product)
                .where(Product.id == product_id, Product.user_id == claims.user_id)
                .values(product_image=new_name)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise await self._classify_missing(db, product_id, claims)

            product = await self._get_owned(db, product_id, claims)
            response = ProductResponse.model_validate(product)
            await db.commit()
        except ProductHubError:
            await db.rollback()
            await file_service.cleanup_file(new_name)
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            await file_service.cleanup_file(new_name)
            logger.error("Database error updating image of product %s: %s", product_id, str(e), exc_info=True)
            raise DatabaseError(context={"operation": "update_product_image", "product_id": product_id})

        if previous and previous != new_name:
            await file_service.cleanup_file(previous)

        logger.info("Product %s image set to %s", product_id, new_name)
        return response


# ── Singleton Instance ────────────────────────────────────────────────────
product_service = ProductService()
