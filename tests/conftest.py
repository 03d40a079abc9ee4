"""
Shared pytest fixtures.

Provides an on-disk cache under tmp_path, a fake clock for the rate
limiter, a fake Congress.gov client serving canned payloads, and small
cache-backed assets for exercising the engine without any API.
"""

import re
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import pytest

from chambress.assets.base import Asset, AssetArgs, EngineContext
from chambress.errors import AssetValidationError
from chambress.utils.storage import CacheStorage


# =============================================================================
# Clock
# =============================================================================

class FakeClock:
    """Deterministic time source: sleeping just advances the clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def time(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Cache / context
# =============================================================================

@pytest.fixture
def cache(tmp_path):
    """CacheStorage rooted in a per-test temporary directory."""
    return CacheStorage(tmp_path / "data")


@pytest.fixture
def events():
    return []


@pytest.fixture
def ctx(cache, fake_api, events):
    return EngineContext(api=fake_api, cache=cache, emit=events.append)


@pytest.fixture
def house_117():
    return AssetArgs(chamber="HOUSE", congress=117)


# =============================================================================
# Fake Congress.gov client
# =============================================================================

_member_route = re.compile(r"^/member/(?P<id>[^/]+)$")
_bill_list_route = re.compile(r"^/bill/(?P<congress>\d+)/(?P<type>hr|s)$")
_bill_route = re.compile(r"^/bill/(?P<congress>\d+)/(?P<type>hr|s)/(?P<number>\d+)(?P<sub>/actions|/committees)?$")


class FakeCongressAPI:
    """Stands in for CongressAPIClient.fetch_json with generated payloads.

    Members are M000000.., bills are numbered 1..bills_count and every bill
    has ``actions_per_bill`` actions. Calls are recorded as (route, params).
    ``fail`` holds (route, offset) pairs (offset None matches any) that
    raise AssetValidationError instead of answering.
    """

    def __init__(self, members_count: int = 3, bills_count: int = 3, actions_per_bill: int = 2):
        self.members = [
            {"bioguideId": f"M{i:06d}", "name": f"Member {i}", "state": "CA", "partyName": "Independent"}
            for i in range(members_count)
        ]
        self.bills_count = bills_count
        self.actions_per_bill = actions_per_bill
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.fail: Set[Tuple[str, Optional[int]]] = set()

    def _page(self, items: Sequence[Any], params: Dict[str, Any]) -> List[Any]:
        offset = params.get("offset", 0)
        limit = params.get("limit", 20)
        return list(items[offset:offset + limit])

    def _should_fail(self, route: str, params: Dict[str, Any]) -> bool:
        return (route, None) in self.fail or (route, params.get("offset")) in self.fail

    def payload(self, route: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if route == "/member":
            return {
                "members": self._page(self.members, params),
                "pagination": {"count": len(self.members)},
            }
        match = _member_route.match(route)
        if match:
            return {"member": {"bioguideId": match.group("id"), "directOrderName": "Someone"}}
        match = _bill_list_route.match(route)
        if match:
            congress, bill_type = int(match.group("congress")), match.group("type")
            bills = [
                {"number": str(n), "congress": congress, "type": bill_type.upper(), "title": f"Bill {n}"}
                for n in range(1, self.bills_count + 1)
            ]
            return {"bills": self._page(bills, params), "pagination": {"count": self.bills_count}}
        match = _bill_route.match(route)
        if match:
            number = int(match.group("number"))
            if match.group("sub") == "/actions":
                actions = [{"actionCode": f"A{i}"} for i in range(self.actions_per_bill)]
                return {"actions": self._page(actions, params), "pagination": {"count": len(actions)}}
            if match.group("sub") == "/committees":
                return {"committees": [{"name": "Committee on Rules"}]}
            return {
                "bill": {
                    "number": str(number),
                    "congress": int(match.group("congress")),
                    "title": f"Bill {number}",
                    "actions": {"count": self.actions_per_bill, "url": f"{route}/actions"},
                }
            }
        raise AssertionError(f"unexpected route {route}")

    def fetch_json(self, route, params, model, asset_name="congress_api"):
        params = dict(params or {})
        self.calls.append((route, params))
        if self._should_fail(route, params):
            raise AssetValidationError(asset_name, f"{route} returned status 500")
        return model.model_validate(self.payload(route, params))


@pytest.fixture
def fake_api():
    return FakeCongressAPI()


# =============================================================================
# Cache-backed stub assets
# =============================================================================

class StubAsset(Asset):
    """Asset whose artifact is ``stubs/<name>.json`` in the context cache."""

    def __init__(self, name: str, deps: Sequence[Asset] = (), fail: bool = False, queue: Optional[str] = None):
        super().__init__(deps)
        self.name = name
        if queue is not None:
            self.queue = queue
        self.fail = fail
        self.created: List[AssetArgs] = []

    def path(self) -> str:
        return f"stubs/{self.name}.json"

    def policy(self, ctx, args, deps_data):
        return ctx.cache.exists(self.path())

    def read(self, ctx, args):
        return ctx.cache.read_json(self.path())

    def create(self, ctx, args, deps_data):
        if self.fail:
            raise RuntimeError(f"{self.name} exploded")
        self.created.append(args)
        ctx.emit_safely({"type": self.name, "status": "COMPLETE"})
        ctx.cache.write_json(self.path(), {"name": self.name, "deps": deps_data})


@pytest.fixture
def stub():
    """Factory for StubAsset instances."""
    return StubAsset


@pytest.fixture
def diamond():
    """root → (left, right) → shared."""
    shared = StubAsset("shared")
    left = StubAsset("left", deps=[shared])
    right = StubAsset("right", deps=[shared])
    root = StubAsset("root", deps=[left, right])
    return {"root": root, "left": left, "right": right, "shared": shared}
