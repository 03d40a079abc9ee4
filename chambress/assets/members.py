"""
Members asset: every page of the /member endpoint, one file per page.

Policy:
 1. Do we have the expected number of page files?
 2. Does each page parse?
 3. Does each page hold the expected number of members (a full page, or the
    remainder on the last one)?
"""
import logging
import re
from typing import List, Optional

from pydantic import BaseModel, Field, TypeAdapter

from chambress.api.models import AllMember, AllMemberResponse
from chambress.assets.base import (
    Asset,
    AssetArgs,
    EngineContext,
    MetaStore,
    PageStatus,
    StoredAssetStatus,
    now_ms,
    page_count,
    page_number_to_offset,
)
from chambress.config import PAGE_SIZE_LIMIT
from chambress.errors import MissingMetadataError

ASSET_NAME = "members"
logger = logging.getLogger(f"chambress.assets.{ASSET_NAME}")

_page_adapter = TypeAdapter(List[AllMember])
_page_pattern = re.compile(rf"{ASSET_NAME}-(\d+)\.json$")


class MembersMeta(BaseModel):
    pageStatuses: List[PageStatus] = Field(default_factory=list)
    lastChecked: Optional[int] = None
    lastCreated: Optional[int] = None


DEFAULT_META = MembersMeta()


def get_file_name(page_number: int) -> str:
    return f"{ASSET_NAME}/{ASSET_NAME}-{page_number}.json"


def get_meta_file_name(args: AssetArgs) -> str:
    return f"{ASSET_NAME}/{ASSET_NAME}-meta.json"


meta_store = MetaStore(ASSET_NAME, MembersMeta, DEFAULT_META, get_meta_file_name)


def expected_page_size(page_number: int, total_pages: int, members_count: int) -> int:
    if page_number < total_pages:
        return PAGE_SIZE_LIMIT
    return members_count - PAGE_SIZE_LIMIT * (total_pages - 1)


def policy_rollup(ctx: EngineContext, members_count: int) -> List[PageStatus]:
    total_pages = page_count(members_count, PAGE_SIZE_LIMIT)
    page_statuses = []
    for page_number in range(1, total_pages + 1):
        filename = get_file_name(page_number)
        status = StoredAssetStatus.PASS
        if not ctx.cache.exists(filename):
            status = StoredAssetStatus.PENDING
        else:
            try:
                members = _page_adapter.validate_json(ctx.cache.read_text(filename))
            except ValueError:
                logger.warning(f"Members page failed to parse: {filename}")
                members = None
            if members is None or len(members) != expected_page_size(page_number, total_pages, members_count):
                status = StoredAssetStatus.FAIL
        page_statuses.append(PageStatus(pageNumber=page_number, filename=filename, status=status))
    return page_statuses


class MembersAsset(Asset):
    name = ASSET_NAME

    def policy(self, ctx: EngineContext, args: AssetArgs, deps_data) -> bool:
        (members_count,) = deps_data
        page_statuses = policy_rollup(ctx, members_count)
        meta_store.write(
            ctx.cache,
            args,
            {
                "pageStatuses": [p.model_dump(mode="json") for p in page_statuses],
                "lastChecked": now_ms(),
            },
        )
        return all(p.status == StoredAssetStatus.PASS for p in page_statuses)

    def read(self, ctx: EngineContext, args: AssetArgs) -> List[AllMember]:
        pages = []
        for key in ctx.cache.list_files(ASSET_NAME):
            match = _page_pattern.search(key)
            if match:
                pages.append((int(match.group(1)), key))
        members: List[AllMember] = []
        for _, key in sorted(pages):
            members.extend(_page_adapter.validate_json(ctx.cache.read_text(key)))
        return members

    def create(self, ctx: EngineContext, args: AssetArgs, deps_data) -> None:
        meta = meta_store.read(ctx.cache, args)
        if meta is None:
            raise MissingMetadataError(get_meta_file_name(args))
        page_statuses = [p.model_copy() for p in meta.pageStatuses]
        missing = [p for p in page_statuses if p.status != StoredAssetStatus.PASS]
        logger.debug(f"Missing {len(missing)} pages")

        for page in missing:
            page.status = StoredAssetStatus.FETCHING
            ctx.emit_safely({"type": ASSET_NAME, "pageStatuses": _dump(page_statuses)})

            offset = page_number_to_offset(page.pageNumber, PAGE_SIZE_LIMIT)
            logger.debug(f"fetching page {page.pageNumber}, offset: {offset}")
            try:
                response = ctx.api.fetch_json(
                    "/member", {"offset": offset, "limit": PAGE_SIZE_LIMIT}, AllMemberResponse, ASSET_NAME
                )
            except Exception:
                page.status = StoredAssetStatus.FAIL
                meta_store.write(ctx.cache, args, {"pageStatuses": _dump(page_statuses)})
                raise

            ctx.cache.write_json(page.filename, [m.model_dump(mode="json") for m in response.members])
            page.status = StoredAssetStatus.PASS
            meta_store.write(ctx.cache, args, {"pageStatuses": _dump(page_statuses)})
            ctx.emit_safely({"type": ASSET_NAME, "pageStatuses": _dump(page_statuses)})

        meta_store.write(ctx.cache, args, {"pageStatuses": _dump(page_statuses), "lastCreated": now_ms()})

    def read_metadata(self, ctx: EngineContext, args: AssetArgs) -> Optional[MembersMeta]:
        return meta_store.read(ctx.cache, args)


def _dump(page_statuses: List[PageStatus]) -> List[dict]:
    return [p.model_dump(mode="json") for p in page_statuses]
