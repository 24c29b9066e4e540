"""
Tests for the order repositories.
"""

import pytest

from transportation_orders.models import TransportationOrder
from transportation_orders.repo import DatabaseRepository, DuplicateOrderError, InMemoryRepository
from transportation_orders.schemas import AppConfig, DatabaseConfig


def make_order(truck="8962ZKR", toid="28", **overrides):
    data = dict(
        toid=toid,
        truck=truck,
        pickup_time=1591682400000,
        pickup_lat=40.4562191,
        pickup_lon=-3.8707211,
        delivery_time=1591692196000,
        delivery_lat=42.0206372,
        delivery_lon=-4.5330132,
    )
    data.update(overrides)
    return TransportationOrder(**data)


@pytest.fixture
def db_repo():
    config = AppConfig(database=DatabaseConfig(url="sqlite://"))
    repo = DatabaseRepository(config)
    repo.create_tables()
    return repo


@pytest.fixture(params=["memory", "database"])
def repo(request, db_repo):
    if request.param == "memory":
        return InMemoryRepository()
    return db_repo


def test_empty_repository(repo):
    assert repo.find_all() == []
    assert repo.count() == 0
    assert repo.find_by_id("8962ZKR") is None


def test_find_by_id(repo):
    repo.save(make_order())
    repo.save(make_order(truck="0001BCD", toid="1"))

    found = repo.find_by_id("8962ZKR")

    assert found is not None
    assert found.toid == "28"
    assert found.pickup_time == 1591682400000
    assert found.delivery_lon == -4.5330132
    assert repo.find_by_id("NOEXISTE") is None


def test_find_all_returns_every_order(repo):
    saved = repo.save_all(make_order(truck=f"T{i:03d}", toid=str(i)) for i in range(5))

    assert saved == 5
    assert repo.count() == 5
    assert sorted(o.truck for o in repo.find_all()) == [f"T{i:03d}" for i in range(5)]


def test_save_replaces_order_for_same_truck(repo):
    repo.save(make_order(status=0))
    repo.save(make_order(status=3, last_lat=41.0))

    assert repo.count() == 1
    order = repo.find_by_id("8962ZKR")
    assert order.status == 3
    assert order.last_lat == 41.0


def test_delete_all(repo):
    repo.save_all([make_order(), make_order(truck="0001BCD", toid="1")])

    assert repo.delete_all() == 2
    assert repo.count() == 0


def test_extra_fields_default_to_zero(repo):
    repo.save(make_order())

    order = repo.find_by_id("8962ZKR")

    assert order.last_time == 0
    assert order.last_lat == 0.0
    assert order.last_lon == 0.0
    assert order.status == 0


def test_database_health_check(db_repo):
    assert db_repo.health_check() is True


def test_toid_held_by_another_truck_is_rejected(repo):
    repo.save(make_order(truck="A", toid="5"))

    with pytest.raises(DuplicateOrderError):
        repo.save(make_order(truck="B", toid="5"))

    assert repo.count() == 1
    assert repo.find_by_id("B") is None


def test_same_truck_keeps_its_toid(repo):
    repo.save(make_order(truck="A", toid="5"))
    repo.save(make_order(truck="A", toid="5", status=2))

    assert repo.find_by_id("A").status == 2


def test_save_all_is_all_or_nothing(repo):
    repo.save(make_order(truck="A", toid="1"))

    with pytest.raises(DuplicateOrderError):
        repo.save_all([make_order(truck="B", toid="5"), make_order(truck="C", toid="5")])

    assert [o.truck for o in repo.find_all()] == ["A"]


def test_replace_all(repo):
    repo.save_all([make_order(truck="A", toid="1"), make_order(truck="B", toid="2")])

    deleted, saved = repo.replace_all([make_order(truck="C", toid="1")])

    assert (deleted, saved) == (2, 1)
    assert [o.truck for o in repo.find_all()] == ["C"]


def test_failed_replace_all_keeps_previous_orders(repo):
    repo.save(make_order(truck="A", toid="1"))

    with pytest.raises(DuplicateOrderError):
        repo.replace_all([make_order(truck="B", toid="5"), make_order(truck="C", toid="5")])

    assert repo.count() == 1
    assert repo.find_by_id("A").toid == "1"
