import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from wishlist_api.core.errors import (
    AlreadyExistsError,
    CapacityExceededError,
    ConcurrencyConflictError,
    OptimisticLockError,
)
from wishlist_api.db.wishlist_repository import WishlistRepository
from wishlist_api.models.wishlist import Product
from wishlist_api.services.wishlist import WishlistService


class BarrierRepository(WishlistRepository):
    """
    Holds every thread's first read until all of them have read, so they all
    start from the same version and race on the write.
    """

    def __init__(self, database, parties):
        super().__init__(database)
        self.barrier = threading.Barrier(parties, timeout=10)
        self._local = threading.local()

    def find_by_id(self, user_id):
        wishlist = super().find_by_id(user_id)
        if not getattr(self._local, "waited", False):
            self._local.waited = True
            self.barrier.wait()
        return wishlist


class InterleavingRepository(WishlistRepository):
    """
    Runs `before_first_save` right before the first write, standing in for a
    request that commits between our read and our write.
    """

    def __init__(self, database, before_first_save):
        super().__init__(database)
        self.before_first_save = before_first_save
        self.saves = 0

    def save(self, wishlist):
        self.saves += 1
        if self.saves == 1:
            self.before_first_save()
        return super().save(wishlist)


class AlwaysStaleRepository(WishlistRepository):
    def __init__(self, database):
        super().__init__(database)
        self.attempts = 0

    def save(self, wishlist):
        self.attempts += 1
        raise OptimisticLockError("someone else always wins")


def test_concurrent_adds_of_different_products_both_land(file_db, product_data):
    WishlistService(WishlistRepository(file_db)).create("123", [])
    racing = WishlistService(BarrierRepository(file_db, parties=2), max_attempts=3)

    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [
            pool.submit(racing.add_product, "123", product_data(quantity=2, product_id="a")),
            pool.submit(racing.add_product, "123", product_data(quantity=3, product_id="b")),
        ]
        for f in futures:
            f.result(timeout=30)

    stored = WishlistRepository(file_db).find_by_id("123")
    assert {p.product_id: p.quantity for p in stored.products} == {"a": 2, "b": 3}
    assert stored.version == 2


def test_add_retries_on_top_of_a_concurrent_write(file_db, product_data):
    plain = WishlistService(WishlistRepository(file_db))
    plain.create("123", [product_data(quantity=1)])

    def competing_add():
        plain.add_product("123", product_data(quantity=4, product_id="other"))

    repo = InterleavingRepository(file_db, competing_add)
    result = WishlistService(repo).add_product("123", product_data(quantity=2))

    assert repo.saves == 2
    assert {p.product_id: p.quantity for p in result.products} == {"1234": 3, "other": 4}
    assert [p.product_id for p in result.products] == ["1234", "other"]


def test_remove_retries_against_fresh_state(file_db, product_data):
    plain = WishlistService(WishlistRepository(file_db))
    plain.create("123", [product_data(quantity=2)])

    def competing_remove():
        plain.remove_product("123", "1234")

    repo = InterleavingRepository(file_db, competing_remove)
    WishlistService(repo).remove_product("123", "1234")

    # both decrements applied: 2 -> 1 -> gone
    assert WishlistRepository(file_db).find_by_id("123").products == []


def test_retry_still_respects_capacity(file_db, product_data):
    plain = WishlistService(WishlistRepository(file_db))
    plain.create("123", [product_data(quantity=10)])

    def competing_add():
        plain.add_product("123", product_data(quantity=9, product_id="other"))

    repo = InterleavingRepository(file_db, competing_add)
    with pytest.raises(CapacityExceededError):
        WishlistService(repo).add_product("123", product_data(quantity=5))

    stored = WishlistRepository(file_db).find_by_id("123")
    assert stored.total_quantity() == 19


def test_retries_are_bounded(file_db, product_data):
    WishlistService(WishlistRepository(file_db)).create("123", [product_data(quantity=1)])
    repo = AlwaysStaleRepository(file_db)

    with pytest.raises(ConcurrencyConflictError) as exc:
        WishlistService(repo, max_attempts=3).add_product("123", product_data(quantity=1))

    assert repo.attempts == 3
    assert isinstance(exc.value.__cause__, OptimisticLockError)
    assert WishlistRepository(file_db).find_by_id("123").products[0].quantity == 1


def test_losing_a_create_race_reports_already_exists(file_db, product_data):
    def competing_create():
        WishlistService(WishlistRepository(file_db)).create("123", [product_data(quantity=1)])

    repo = InterleavingRepository(file_db, competing_create)
    with pytest.raises(AlreadyExistsError):
        WishlistService(repo).create("123", [product_data(quantity=5, product_id="mine")])

    assert repo.saves == 1  # create never retries
    stored = WishlistRepository(file_db).find_by_id("123")
    assert [(p.product_id, p.quantity) for p in stored.products] == [("1234", 1)]


def test_different_users_do_not_conflict(file_db, product_data):
    service = WishlistService(WishlistRepository(file_db))
    for uid in ("u1", "u2", "u3", "u4"):
        service.create(uid, [])

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(lambda uid: service.add_product(uid, product_data(product_id=uid)),
                                ("u1", "u2", "u3", "u4")))

    assert all(r.version == 1 for r in results)
    for uid in ("u1", "u2", "u3", "u4"):
        assert WishlistRepository(file_db).find_by_id(uid).find_product(uid) is not None


def test_product_snapshot_from_store_is_independent(file_db, product_data):
    repo = WishlistRepository(file_db)
    WishlistService(repo).create("123", [product_data(quantity=1)])
    a = repo.find_by_id("123")
    a.add_product(Product.from_request(product_data(quantity=5)))
    # unsaved in-memory change is invisible to other readers
    assert repo.find_by_id("123").products[0].quantity == 1


def test_conflicts_are_logged_through_uvicorn_error(file_db, product_data, caplog):
    WishlistService(WishlistRepository(file_db)).create("123", [product_data(quantity=1)])
    caplog.set_level(logging.INFO, logger="uvicorn.error")

    with pytest.raises(ConcurrencyConflictError):
        WishlistService(AlwaysStaleRepository(file_db), max_attempts=2).add_product("123", product_data())

    records = [r for r in caplog.records if r.name.startswith("uvicorn.error.wishlist_api")]
    assert any("Version conflict on add for user 123 (attempt 1/2)" in r.getMessage() for r in records)
    assert any(r.levelno == logging.WARNING and "Giving up add" in r.getMessage() for r in records)
