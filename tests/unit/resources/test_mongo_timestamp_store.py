"""
Unit tests for MongoTimestampStore.

Uses mongomock to exercise MongoDB operations without a live service.
"""

from unittest.mock import Mock

import mongomock
import pytest

from chambress.api.congress_api import RateLimiter
from chambress.resources.mongo import MongoDBResource, MongoTimestampStore


class PingableClient:
    """mongomock client that also answers the connection ping."""

    def __init__(self, client):
        self._client = client
        self.admin = Mock()
        self.closed = 0

    def __getitem__(self, name):
        return self._client[name]

    def close(self):
        self.closed += 1


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def mongomock_client():
    """In-memory MongoDB client for tests."""
    return mongomock.MongoClient()


@pytest.fixture
def pingable(mongomock_client):
    return PingableClient(mongomock_client)


@pytest.fixture
def mongo_resource(monkeypatch, pingable):
    """MongoDBResource configured to use the mongomock client."""
    monkeypatch.setattr(
        "chambress.resources.mongo.MongoClient",
        lambda *args, **kwargs: pingable,
    )
    return MongoDBResource(connection_string="mongodb://localhost:27017", database_name="chambress_test")


@pytest.fixture
def store(mongo_resource):
    return MongoTimestampStore(mongo_resource)


# =============================================================================
# Store operations
# =============================================================================

def test_empty_store_has_no_timestamp(store):
    assert store.get() is None


def test_set_then_get(store, mongomock_client):
    store.set(1234.5)

    assert store.get() == 1234.5
    doc = mongomock_client["chambress_test"]["rate_limiter"].find_one({"_id": "last-congress-api-call"})
    assert doc["timestamp"] == 1234.5


def test_first_claim_inserts(store):
    assert store.compare_and_set(None, 10.0) is True
    assert store.get() == 10.0


def test_first_claim_loses_to_an_existing_timestamp(store):
    store.set(5.0)

    assert store.compare_and_set(None, 10.0) is False
    assert store.get() == 5.0


def test_claim_on_stale_value_is_refused(store):
    store.set(5.0)

    assert store.compare_and_set(4.0, 10.0) is False
    assert store.compare_and_set(5.0, 10.0) is True
    assert store.get() == 10.0


def test_every_call_connects_and_disconnects(store, pingable):
    store.set(1.0)
    store.get()

    assert pingable.closed == 2
    assert pingable.admin.command.call_count == 2


def test_keys_are_independent(mongo_resource):
    house = MongoTimestampStore(mongo_resource, key="house")
    senate = MongoTimestampStore(mongo_resource, key="senate")

    house.set(1.0)

    assert senate.get() is None


def test_limiters_in_different_processes_share_the_mongo_timestamp(mongo_resource, clock):
    first = RateLimiter(1, 3600, store=MongoTimestampStore(mongo_resource), clock=clock.time, sleep=clock.sleep)
    second = RateLimiter(1, 3600, store=MongoTimestampStore(mongo_resource), clock=clock.time, sleep=clock.sleep)

    first.call(lambda: None)
    second.call(lambda: None)

    assert clock.sleeps == [pytest.approx(1.0)]
