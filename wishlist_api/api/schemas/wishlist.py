# --- Pydantic schemas for wishlist endpoints ---
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from wishlist_api.core.errors import ErrorType
from wishlist_api.models.wishlist import Product, Wishlist


class ProductRequest(BaseModel):
    product_id: str = Field(..., min_length=1, description="Product identifier, unique within a wishlist")
    product_name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, description="Units to add; merged into an existing line with the same id")


class WishlistRequest(BaseModel):
    user_id: str = Field(..., min_length=1, description="Owner of the wishlist (one wishlist per user)")
    products: List[ProductRequest] = Field(default_factory=list)


class ProductResponse(BaseModel):
    product_id: str
    product_name: str
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        return cls.model_validate(product)


class WishlistResponse(BaseModel):
    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    products: List[ProductResponse] = []

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_wishlist(cls, wishlist: Wishlist) -> "WishlistResponse":
        return cls(
            user_id=wishlist.user_id,
            created_at=wishlist.created_at,
            updated_at=wishlist.updated_at,
            products=[ProductResponse.from_product(p) for p in wishlist.products],
        )


class ApiErrorResponse(BaseModel):
    type: ErrorType
    message: str


class ValidationErrorResponse(BaseModel):
    type: ErrorType = ErrorType.VALIDATION_ERROR
    errors: List[str] = []
