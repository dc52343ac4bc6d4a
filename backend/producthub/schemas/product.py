"""
ProductHub Backend — Product Request/Response Schemas
=======================================================

Create and update share one body shape. Fields are optional so the service
can apply its own rules: create requires all three, update keeps the stored
value for any field that is absent or blank.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ProductPayload(BaseModel):
    """Body of POST /products/add and PATCH /products/update."""

    name: Optional[str] = None
    qty: Optional[int] = None
    description: Optional[str] = None

    @field_validator("qty", mode="before")
    @classmethod
    def blank_qty_is_missing(cls, v: Any) -> Any:
        """Form clients send "" for an untouched qty input."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ProductResponse(BaseModel):
    """Full representation of a product row."""

    id: int
    user_id: int
    name: str
    qty: int
    description: str
    product_image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


ProductList = List[ProductResponse]
