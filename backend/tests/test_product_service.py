"""
ProductHub Backend — Product Service Unit Tests
=================================================

Service-level checks of the conditional mutations, using two independent
sessions to stand in for two concurrent requests.
"""

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from producthub.exceptions import AuthorizationError, DatabaseError, NotFoundError
from producthub.models import Product, User
from producthub.services.product_service import product_service
from producthub.services.token_service import Claims


async def make_user(session, email):
    user = User(email=email, password_hash="$2b$04$placeholder", first_name="T", last_name="U")
    session.add(user)
    await session.commit()
    return Claims(user_id=user.id, email=email)


class TestConditionalMutations:
    @pytest.mark.asyncio
    async def test_update_after_concurrent_delete_is_not_found(self, db_session_factory):
        """
        Request A deletes the product; request B, which saw it before, then
        updates. B must not report success.
        """
        async with db_session_factory() as setup:
            owner = await make_user(setup, "ana@gmail.com")
            created = await product_service.create(setup, owner, "Kopi", 5, "Arabika")

        async with db_session_factory() as request_b:
            seen = await product_service.search(request_b, owner, created.id)
            assert seen.id == created.id

            async with db_session_factory() as request_a:
                await product_service.delete(request_a, owner, created.id)

            with pytest.raises(NotFoundError) as exc_info:
                await product_service.update(request_b, owner, created.id, qty=9)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Product ID Tidak Ditemukan"

    @pytest.mark.asyncio
    async def test_image_update_after_concurrent_delete(self, db_session_factory, temp_storage, sample_image_bytes):
        async with db_session_factory() as setup:
            owner = await make_user(setup, "ana@gmail.com")
            created = await product_service.create(setup, owner, "Kopi", 5, "Arabika")
            await product_service.delete(setup, owner, created.id)

        async with db_session_factory() as session:
            with pytest.raises(NotFoundError):
                await product_service.update_image(
                    session, owner, created.id, "kopi.jpg", "image/jpeg", sample_image_bytes
                )

        assert list(temp_storage.iterdir()) == []

    @pytest.mark.asyncio
    async def test_foreign_update_is_forbidden_and_row_untouched(self, db_session):
        owner = await make_user(db_session, "ana@gmail.com")
        intruder = await make_user(db_session, "budi@yahoo.com")
        created = await product_service.create(db_session, owner, "Kopi", 5, "Arabika")

        with pytest.raises(AuthorizationError):
            await product_service.update(db_session, intruder, created.id, name="Dicuri")
        with pytest.raises(AuthorizationError):
            await product_service.delete(db_session, intruder, created.id)

        row = (
            await db_session.execute(
                select(Product).where(Product.id == created.id).execution_options(populate_existing=True)
            )
        ).scalar_one()
        assert row.name == "Kopi"
        assert row.user_id == owner.user_id

    @pytest.mark.asyncio
    async def test_no_op_update_on_foreign_product_is_forbidden(self, db_session):
        owner = await make_user(db_session, "ana@gmail.com")
        intruder = await make_user(db_session, "budi@yahoo.com")
        created = await product_service.create(db_session, owner, "Kopi", 5, "Arabika")

        with pytest.raises(AuthorizationError):
            await product_service.update(db_session, intruder, created.id)


class TestDatabaseFailures:
    @pytest.mark.asyncio
    async def test_sqlalchemy_error_becomes_database_error(self, db_session, monkeypatch):
        owner = Claims(user_id=1, email="ana@gmail.com")

        async def broken_execute(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(db_session, "execute", broken_execute)

        with pytest.raises(DatabaseError) as exc_info:
            await product_service.list_products(db_session, owner)
        assert exc_info.value.message == "System error"
        assert exc_info.value.status_code == 500
