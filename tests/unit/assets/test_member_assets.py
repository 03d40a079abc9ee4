"""
End-to-end tests for membersCount, members and bioguides.

Assets run through materialize() against the fake Congress.gov client and a
tmp_path cache.
"""

import pytest

from chambress.assets import get_asset
from chambress.assets.base import AssetArgs, StoredAssetStatus
from chambress.engine.runner import materialize


def statuses(results):
    return {job_id: result.status for job_id, result in results.items()}


# =============================================================================
# Fresh cache
# =============================================================================

def test_members_chain_is_created_from_scratch(ctx, cache, fake_api):
    results = materialize("bioguides", ctx=ctx)

    assert statuses(results) == {0: "created", 1: "created", 2: "created"}
    assert cache.read_text("membersCount/membersCount.txt") == "3"
    assert len(cache.read_json("members/members-1.json")) == 3
    assert cache.list_files("bioguides") == [
        "bioguides/M000000.json",
        "bioguides/M000001.json",
        "bioguides/M000002.json",
    ]
    assert [route for route, _ in fake_api.calls] == [
        "/member",
        "/member",
        "/member/M000000",
        "/member/M000001",
        "/member/M000002",
    ]


def test_second_run_passes_policy_without_fetching(ctx, fake_api):
    materialize("bioguides", ctx=ctx)
    calls_after_first_run = len(fake_api.calls)

    results = materialize("bioguides", ctx=ctx)

    assert statuses(results) == {0: "read", 1: "read", 2: "read"}
    assert len(fake_api.calls) == calls_after_first_run


def test_read_returns_cached_records(ctx):
    materialize("bioguides", ctx=ctx)
    args = AssetArgs()

    members = get_asset("members").read(ctx, args)
    bioguides = get_asset("bioguides").read(ctx, args)

    assert [m.bioguideId for m in members] == ["M000000", "M000001", "M000002"]
    assert {b.bioguideId for b in bioguides} == {"M000000", "M000001", "M000002"}
    assert get_asset("membersCount").read(ctx, args) == 3


def test_metadata_records_checks_and_creation(ctx):
    materialize("members", ctx=ctx)

    count_meta = get_asset("membersCount").read_metadata(ctx, AssetArgs())
    members_meta = get_asset("members").read_metadata(ctx, AssetArgs())

    assert count_meta.fileExists is True
    assert count_meta.lastCreated is not None
    assert [p.status for p in members_meta.pageStatuses] == [StoredAssetStatus.PASS]
    assert members_meta.lastCreated is not None


def test_corrupt_count_file_fails_the_job(ctx, cache):
    cache.write_text("membersCount/membersCount.txt", "not a number")

    results = materialize("membersCount", ctx=ctx)

    assert results[0].status == "failed"
    assert "not an integer" in results[0].data


# =============================================================================
# Pagination and resume
# =============================================================================

@pytest.fixture
def small_pages(monkeypatch):
    monkeypatch.setattr("chambress.assets.members.PAGE_SIZE_LIMIT", 2)


def test_members_are_paged_with_a_short_last_page(ctx, cache, fake_api, small_pages):
    fake_api.members = fake_api.members + [
        {"bioguideId": "M000003"},
        {"bioguideId": "M000004"},
    ]

    materialize("members", ctx=ctx)

    assert cache.list_files("members") == [
        "members/members-1.json",
        "members/members-2.json",
        "members/members-3.json",
        "members/members-meta.json",
    ]
    assert len(cache.read_json("members/members-3.json")) == 1
    assert len(get_asset("members").read(ctx, AssetArgs())) == 5


def test_partial_failure_resumes_from_metadata(ctx, fake_api, small_pages):
    fake_api.members = fake_api.members + [
        {"bioguideId": "M000003"},
        {"bioguideId": "M000004"},
    ]
    fake_api.fail.add(("/member", 2))

    first = materialize("members", ctx=ctx)

    assert first[0].status == "failed"
    meta = get_asset("members").read_metadata(ctx, AssetArgs())
    assert [p.status for p in meta.pageStatuses] == [
        StoredAssetStatus.PASS,
        StoredAssetStatus.FAIL,
        StoredAssetStatus.PENDING,
    ]

    fake_api.fail.clear()
    fake_api.calls.clear()
    second = materialize("members", ctx=ctx)

    assert statuses(second) == {0: "created", 1: "read"}
    assert fake_api.calls == [
        ("/member", {"offset": 2, "limit": 2}),
        ("/member", {"offset": 4, "limit": 2}),
    ]
    members = get_asset("members").read(ctx, AssetArgs())
    assert [m.bioguideId for m in members] == [f"M00000{i}" for i in range(5)]


def test_truncated_page_is_refetched(ctx, cache, fake_api):
    materialize("members", ctx=ctx)
    cache.write_json("members/members-1.json", fake_api.members[:1])
    fake_api.calls.clear()

    results = materialize("members", ctx=ctx)

    assert results[0].status == "created"
    assert fake_api.calls == [("/member", {"offset": 0, "limit": 250})]


def test_bioguides_failure_keeps_remaining_ids(ctx, events, fake_api):
    fake_api.fail.add(("/member/M000001", None))

    results = materialize("bioguides", ctx=ctx)

    assert results[0].status == "failed"
    meta = get_asset("bioguides").read_metadata(ctx, AssetArgs())
    assert meta.missingBioguides == ["M000001", "M000002"]
    assert {"type": "bioguides", "bioguideId": "M000000", "status": "SUCCESS"} in events


def test_wrong_sized_page_is_marked_failed_and_refetched(ctx, cache, fake_api):
    materialize("members", ctx=ctx)
    cache.write_json("members/members-1.json", [])
    fake_api.calls.clear()

    assert get_asset("members").policy(ctx, AssetArgs(), [3]) is False
    meta = get_asset("members").read_metadata(ctx, AssetArgs())
    assert [p.status for p in meta.pageStatuses] == [StoredAssetStatus.FAIL]

    materialize("members", ctx=ctx)

    assert fake_api.calls == [("/member", {"offset": 0, "limit": 250})]
    assert len(cache.read_json("members/members-1.json")) == 3
