# wishlist_api/api/deps.py
from fastapi import Depends

from wishlist_api.config import Settings, get_settings
from wishlist_api.database import db
from wishlist_api.db.wishlist_repository import WishlistRepository
from wishlist_api.services.wishlist import WishlistService


def get_db():
    """
    Dependency that returns the file-backed DB object.
    Usage:
        db = Depends(get_db)
    """
    return db


def get_repository(database=Depends(get_db)) -> WishlistRepository:
    return WishlistRepository(database)


def get_wishlist_service(
    repository: WishlistRepository = Depends(get_repository),
    settings: Settings = Depends(get_settings),
) -> WishlistService:
    """
    A fresh service per request; all shared state lives in the store.
    """
    return WishlistService(
        repository,
        max_items=settings.WISHLIST_MAX_ITEMS,
        max_attempts=settings.WISHLIST_MAX_ATTEMPTS,
    )
