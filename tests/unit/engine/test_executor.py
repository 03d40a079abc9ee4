"""
Unit tests for the per-job executor.

Covers both terminal paths and that every failure, wherever it happens,
comes back as a failed JobResult rather than an exception.
"""

from unittest.mock import Mock

from chambress.assets.base import AssetArgs, EngineContext
from chambress.engine.executor import execute_job


def test_missing_cache_is_created(stub, cache):
    asset = stub("thing")
    ctx = EngineContext(cache=cache)

    result = execute_job(asset, ctx, AssetArgs())

    assert result.status == "created"
    assert result.message == "Asset materialized"
    assert result.ok
    assert cache.read_json("stubs/thing.json") == {"name": "thing", "deps": []}


def test_valid_cache_is_read_without_create(stub, cache):
    asset = stub("thing")
    cache.write_json("stubs/thing.json", {"name": "thing", "deps": ["cached"]})

    result = execute_job(asset, EngineContext(cache=cache), AssetArgs())

    assert result.status == "read"
    assert result.data == {"name": "thing", "deps": ["cached"]}
    assert asset.created == []


def test_dependency_outputs_feed_create(stub, cache):
    leaf = stub("leaf")
    root = stub("root", deps=[leaf])
    cache.write_json("stubs/leaf.json", {"name": "leaf", "deps": []})

    execute_job(root, EngineContext(cache=cache), AssetArgs())

    assert cache.read_json("stubs/root.json")["deps"] == [{"name": "leaf", "deps": []}]


def test_create_failure_becomes_failed_result(stub, cache):
    result = execute_job(stub("bad", fail=True), EngineContext(cache=cache), AssetArgs())

    assert result.status == "failed"
    assert result.message == "Asset failed"
    assert result.data == "bad exploded"
    assert not result.ok


def test_missing_dependency_output_becomes_failed_result(stub, cache):
    root = stub("root", deps=[stub("never-built")])

    result = execute_job(root, EngineContext(cache=cache), AssetArgs())

    assert result.status == "failed"
    assert root.created == []


def test_policy_failure_becomes_failed_result(stub, cache):
    asset = stub("thing")
    asset.policy = Mock(side_effect=ValueError("thing requires chamber and congress arguments"))

    result = execute_job(asset, EngineContext(cache=cache), AssetArgs())

    assert result.status == "failed"
    assert "requires chamber" in result.data


def test_broken_progress_observer_does_not_fail_the_job(stub, cache):
    ctx = EngineContext(cache=cache, emit=Mock(side_effect=RuntimeError("socket closed")))

    result = execute_job(stub("thing"), ctx, AssetArgs())

    assert result.status == "created"


def test_progress_events_reach_the_observer(stub, cache):
    events = []
    ctx = EngineContext(cache=cache, emit=events.append)

    execute_job(stub("thing"), ctx, AssetArgs())

    assert events == [{"type": "thing", "status": "COMPLETE"}]
