### FILE: wishlist_api/db/wishlist_repository.py
from dataclasses import replace
from typing import Optional

from wishlist_api.database import FileBackedDB, db as default_db
from wishlist_api.models.wishlist import Wishlist, utcnow

TABLE = "wishlists"
KEY = "user_id"
COLUMNS = ["user_id", "created_at", "updated_at", "products", "version"]


class WishlistRepository:
    """
    Stores one wishlist document per user on top of FileBackedDB.

    `save` is the only write path. It never partially applies: a stale version
    (or a duplicate insert) raises OptimisticLockError and leaves the stored row
    untouched.
    """

    def __init__(self, database: Optional[FileBackedDB] = None):
        self.db = database or default_db

    def find_by_id(self, user_id: str) -> Optional[Wishlist]:
        row = self.db.get_record(TABLE, KEY, user_id)
        if row is None:
            return None
        return Wishlist.from_dict(row)

    def find_by_user_id_and_product_id(self, user_id: str, product_id: str) -> Optional[Wishlist]:
        wishlist = self.find_by_id(user_id)
        if wishlist is None or wishlist.find_product(product_id) is None:
            return None
        return wishlist

    def save(self, wishlist: Wishlist) -> Wishlist:
        """
        Insert a never-stored wishlist at version 0, or swap the stored row when
        its version still matches `wishlist.version`. Returns the stored copy with
        the new version and refreshed timestamps; the argument is not modified.
        """
        now = utcnow()
        if wishlist.version is None:
            stored = replace(wishlist, created_at=wishlist.created_at or now, updated_at=now, version=0)
            self.db.insert_record(TABLE, stored.to_dict(), key=KEY)
            return stored

        stored = replace(wishlist, updated_at=now, version=int(wishlist.version) + 1)
        self.db.replace_record(TABLE, KEY, wishlist.user_id, stored.to_dict(),
                               expected_version=int(wishlist.version))
        return stored
