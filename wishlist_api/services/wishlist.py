import logging
from typing import Any, Callable, Dict, Iterable, Optional

from wishlist_api.core.errors import (
    AlreadyExistsError,
    ConcurrencyConflictError,
    NotFoundError,
    OptimisticLockError,
)
from wishlist_api.db.wishlist_repository import WishlistRepository
from wishlist_api.models.wishlist import Product, Wishlist

logger = logging.getLogger("uvicorn.error").getChild(__name__)

DEFAULT_MAX_ITEMS = 20
DEFAULT_MAX_ATTEMPTS = 3

Mutation = Callable[[Wishlist], None]


class WishlistLookup:
    """
    Read-only queries. Every call goes to the repository; nothing is cached
    between requests.
    """

    def __init__(self, repository: WishlistRepository):
        self.repository = repository

    def get_by_user_id(self, user_id: str) -> Wishlist:
        wishlist = self.repository.find_by_id(user_id)
        if wishlist is None:
            raise NotFoundError(f"Wishlist not found to user: {user_id}")
        return wishlist

    def is_product_in_wishlist(self, user_id: str, product_id: str) -> Product:
        wishlist = self.repository.find_by_user_id_and_product_id(user_id, product_id)
        product = wishlist.find_product(product_id) if wishlist is not None else None
        if product is None:
            raise NotFoundError(f"Product not found in wishlist of user: {user_id}")
        return product


class WishlistService(WishlistLookup):
    """
    Wishlist mutations with optimistic concurrency.

    The service holds no per-request state. Each mutation reads the stored
    wishlist, applies its change in memory, re-checks capacity and writes back
    with the version it read. When another request wrote first, add/remove start
    over from the fresh state, up to `max_attempts` times; create never retries.
    """

    def __init__(self, repository: WishlistRepository, max_items: int = DEFAULT_MAX_ITEMS,
                 max_attempts: int = DEFAULT_MAX_ATTEMPTS):
        super().__init__(repository)
        self.max_items = int(max_items)
        self.max_attempts = max(1, int(max_attempts))

    def create(self, user_id: str, products: Iterable[Dict[str, Any]]) -> Wishlist:
        if self.repository.find_by_id(user_id) is not None:
            raise AlreadyExistsError(f"Wishlist already exists to user: {user_id}")

        wishlist = Wishlist(user_id=user_id)
        for item in products or []:
            wishlist.add_product(Product.from_request(item))
        wishlist.check_capacity(self.max_items)

        try:
            saved = self.repository.save(wishlist)
        except OptimisticLockError:
            # another create for the same user got there first
            logger.info("Lost create race for user %s", user_id)
            raise AlreadyExistsError(f"Wishlist already exists to user: {user_id}")
        logger.info("Created wishlist for user %s with %d item(s)", user_id, saved.total_quantity())
        return saved

    def add_product(self, user_id: str, product: Dict[str, Any]) -> Wishlist:
        def merge(wishlist: Wishlist) -> None:
            wishlist.add_product(Product.from_request(product))

        return self._mutate(user_id, merge, action="add")

    def remove_product(self, user_id: str, product_id: str) -> None:
        def decrement(wishlist: Wishlist) -> None:
            wishlist.remove_product(product_id)

        # decrements skip the capacity check
        self._mutate(user_id, decrement, action="remove", check_capacity=False)

    def _mutate(self, user_id: str, mutation: Mutation, action: str,
                check_capacity: bool = True) -> Wishlist:
        """
        Read-modify-write loop. NotFound and capacity errors surface on the
        attempt that hits them; version conflicts retry against fresh state.
        """
        last_conflict: Optional[OptimisticLockError] = None
        for attempt in range(1, self.max_attempts + 1):
            wishlist = self.get_by_user_id(user_id)
            mutation(wishlist)
            if check_capacity:
                wishlist.check_capacity(self.max_items)
            try:
                return self.repository.save(wishlist)
            except OptimisticLockError as exc:
                last_conflict = exc
                logger.info("Version conflict on %s for user %s (attempt %d/%d): %s",
                            action, user_id, attempt, self.max_attempts, exc)

        logger.warning("Giving up %s for user %s after %d attempts", action, user_id, self.max_attempts)
        raise ConcurrencyConflictError(
            f"Wishlist of user {user_id} was modified concurrently, please try again."
        ) from last_conflict
