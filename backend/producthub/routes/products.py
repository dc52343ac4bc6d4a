"""
ProductHub Backend — Product Route Handlers
=============================================

What:  /products endpoints. All of them require a bearer token and only
       ever see or touch the caller's own products.
How:   Product ids arrive as the `id` query parameter; create/update bodies
       share ProductPayload. Handlers delegate to ProductService.

Status codes worth knowing:
    400  unknown product id ("Product ID Tidak Ditemukan"), bad pagination,
         blank fields on create, bad image
    403  the product exists but belongs to someone else
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from producthub.database import get_db_session
from producthub.middleware.auth import require_auth
from producthub.schemas.common import Envelope, ErrorResponse
from producthub.schemas.product import ProductList, ProductPayload, ProductResponse
from producthub.services.product_service import product_service
from producthub.services.file_service import file_service
from producthub.services.token_service import Claims

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])

ERRORS = {
    400: {"description": "Invalid input or unknown product id", "model": ErrorResponse},
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
OWNER_ERRORS = {
    **ERRORS,
    403: {"description": "Product belongs to another user", "model": ErrorResponse},
}


def product_id_query(
    product_id: Optional[int] = Query(default=None, alias="id", description="Product id"),
) -> Optional[int]:
    return product_id


@router.post(
    "/add",
    response_model=Envelope[ProductResponse],
    responses=ERRORS,
    summary="Create a product owned by the caller",
)
async def add_product(
    payload: Optional[ProductPayload] = Body(default=None),
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ProductResponse]:
    payload = payload or ProductPayload()
    product = await product_service.create(
        db, claims, name=payload.name, qty=payload.qty, description=payload.description
    )
    return Envelope[ProductResponse](message="Berhasil menambahkan product", data=product)


@router.get(
    "/getAll",
    response_model=Envelope[ProductList],
    responses=ERRORS,
    summary="List the caller's products",
    description=(
        "Without limit every product is returned. With limit > 0 at most `limit` "
        "products are returned after skipping `offset`. An offset without a "
        "positive limit is rejected."
    ),
)
async def get_all_products(
    limit: Optional[int] = Query(default=None, description="Page size; 0 or absent returns all"),
    offset: Optional[int] = Query(default=None, description="Rows to skip; requires limit > 0"),
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ProductList]:
    products = await product_service.list_products(db, claims, limit=limit, offset=offset)
    return Envelope[ProductList](message="Success Get All Products", data=products)


@router.get(
    "/search",
    response_model=Envelope[ProductResponse],
    responses=ERRORS,
    summary="Get one of the caller's products by id",
)
async def search_product(
    product_id: Optional[int] = Depends(product_id_query),
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ProductResponse]:
    product = await product_service.search(db, claims, product_id)
    return Envelope[ProductResponse](message="Success Get Product", data=product)


@router.patch(
    "/update",
    response_model=Envelope[ProductResponse],
    responses=OWNER_ERRORS,
    summary="Partially update a product",
    description="Fields that are absent or blank keep their stored value.",
)
async def update_product(
    payload: Optional[ProductPayload] = Body(default=None),
    product_id: Optional[int] = Depends(product_id_query),
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ProductResponse]:
    payload = payload or ProductPayload()
    product = await product_service.update(
        db,
        claims,
        product_id,
        name=payload.name,
        qty=payload.qty,
        description=payload.description,
    )
    return Envelope[ProductResponse](message="Success Update Product", data=product)


@router.delete(
    "/delete",
    response_model=Envelope[None],
    responses=OWNER_ERRORS,
    summary="Delete a product",
)
async def delete_product(
    product_id: Optional[int] = Depends(product_id_query),
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[None]:
    await product_service.delete(db, claims, product_id)
    return Envelope[None](message="Delete Produk berhasil")


@router.patch(
    "/updateProductImage",
    response_model=Envelope[ProductResponse],
    responses=OWNER_ERRORS,
    summary="Upload a new product image (JPEG or PNG)",
)
async def update_product_image(
    image: Optional[UploadFile] = File(default=None, description="JPEG or PNG image"),
    product_id: Optional[int] = Depends(product_id_query),
    claims: Claims = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> Envelope[ProductResponse]:
    content = await file_service.read_upload(image)
    product = await product_service.update_image(
        db,
        claims,
        product_id,
        filename=image.filename if image is not None else None,
        content_type=image.content_type if image is not None else None,
        content=content,
    )
    return Envelope[ProductResponse](message="Update Product Image berhasil", data=product)
