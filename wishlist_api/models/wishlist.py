# wishlist_api/models/wishlist.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import json

from wishlist_api.core.errors import CapacityExceededError, NotFoundError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(raw: Any) -> Optional[datetime]:
    if not raw:
        return None
    if isinstance(raw, datetime):
        return raw
    try:
        return datetime.fromisoformat(str(raw))
    except ValueError:
        return None


def _format_datetime(value: Optional[datetime]) -> str:
    if value and isinstance(value, datetime):
        return value.isoformat(sep=" ")
    return ""


@dataclass
class Product:
    """A wishlist line item. Quantity is owned by the wishlist, not a catalog."""
    product_id: str
    product_name: str = ""
    quantity: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_request(cls, d: Dict[str, Any]) -> "Product":
        """Build a brand new line item from request data, stamped with the current time."""
        now = utcnow()
        return cls(
            product_id=str(d["product_id"]),
            product_name=str(d.get("product_name") or ""),
            quantity=int(d["quantity"]),
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Product":
        if d is None:
            raise ValueError("Cannot construct Product from None")
        return cls(
            product_id=str(d.get("product_id") or ""),
            product_name=str(d.get("product_name") or ""),
            quantity=int(float(d.get("quantity") or 0)),
            created_at=_parse_datetime(d.get("created_at")),
            updated_at=_parse_datetime(d.get("updated_at")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "quantity": int(self.quantity),
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
        }


@dataclass
class Wishlist:
    """
    One user's wishlist. Products keep insertion order and never repeat a product_id.

    `version` is None until the wishlist has been stored once; the repository
    uses it for compare-and-swap writes.
    """
    user_id: str
    products: List[Product] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: Optional[int] = None

    def total_quantity(self) -> int:
        return int(sum(p.quantity for p in self.products))

    def check_capacity(self, max_items: int) -> None:
        if self.total_quantity() > max_items:
            raise CapacityExceededError(
                f"The total number of items on the wish list cannot exceed {max_items}."
            )

    def find_product(self, product_id: str) -> Optional[Product]:
        for p in self.products:
            if p.product_id == product_id:
                return p
        return None

    def add_product(self, product: Product) -> Product:
        """
        Merge by id: an existing line gets the incoming quantity added to it,
        otherwise the product is appended. Returns the line that now holds it.
        """
        existing = self.find_product(product.product_id)
        if existing is None:
            self.products.append(product)
            return product
        existing.quantity = int(existing.quantity) + int(product.quantity)
        existing.updated_at = utcnow()
        return existing

    def remove_product(self, product_id: str) -> Optional[Product]:
        """
        Take one unit of `product_id` off the wishlist. Returns the remaining
        line, or None when the last unit was removed along with the line.
        """
        existing = self.find_product(product_id)
        if existing is None:
            raise NotFoundError("Product not found in wishlist!")
        if existing.quantity > 1:
            existing.quantity = int(existing.quantity) - 1
            existing.updated_at = utcnow()
            return existing
        self.products.remove(existing)
        return None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Wishlist":
        if d is None:
            raise ValueError("Cannot construct Wishlist from None")
        # products are stored as a JSON string in a single CSV cell
        raw_products = d.get("products") or []
        if isinstance(raw_products, str):
            raw_products = json.loads(raw_products) if raw_products.strip() else []
        products = [p if isinstance(p, Product) else Product.from_dict(p) for p in raw_products]

        version_raw = d.get("version")
        version = int(float(version_raw)) if version_raw not in (None, "") else None

        return cls(
            user_id=str(d.get("user_id") or ""),
            products=products,
            created_at=_parse_datetime(d.get("created_at")),
            updated_at=_parse_datetime(d.get("updated_at")),
            version=version,
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        Flatten into a storage row. `products` is serialized as a JSON string.
        """
        return {
            "user_id": self.user_id,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
            "products": json.dumps([p.to_dict() for p in self.products], ensure_ascii=False),
            "version": "" if self.version is None else int(self.version),
        }
