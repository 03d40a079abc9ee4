"""Bills list asset: the paginated /bill/{congress}/{type} listing."""
import logging
import re
from typing import List, Optional

from pydantic import BaseModel, Field

from chambress.api.congress_api import bill_type_for_chamber
from chambress.api.models import BillListItem, BillListResponse
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

ASSET_NAME = "billsList"
logger = logging.getLogger(f"chambress.assets.{ASSET_NAME}")

_page_pattern = re.compile(r"page-(\d+)\.json$")


class StoredBillsPage(BaseModel):
    bills: List[BillListItem]


class BillsListMeta(BaseModel):
    pageStatuses: List[PageStatus] = Field(default_factory=list)
    lastChecked: Optional[int] = None
    lastCreated: Optional[int] = None


DEFAULT_META = BillsListMeta()


def get_dir_name(args: AssetArgs) -> str:
    chamber, congress = args.require(ASSET_NAME)
    return f"{ASSET_NAME}/{congress}/{chamber}"


def get_file_name(args: AssetArgs, page_number: int) -> str:
    return f"{get_dir_name(args)}/page-{page_number}.json"


def get_meta_file_name(args: AssetArgs) -> str:
    chamber, congress = args.require(ASSET_NAME)
    return f"{ASSET_NAME}/{congress}/{chamber}-meta.json"


meta_store = MetaStore(ASSET_NAME, BillsListMeta, DEFAULT_META, get_meta_file_name)


def get_bills_page_statuses(ctx: EngineContext, args: AssetArgs, bills_count: int) -> List[PageStatus]:
    total_pages = page_count(bills_count, PAGE_SIZE_LIMIT)
    page_statuses = []
    for page_number in range(1, total_pages + 1):
        filename = get_file_name(args, page_number)
        expected = PAGE_SIZE_LIMIT if page_number < total_pages else bills_count - PAGE_SIZE_LIMIT * (total_pages - 1)
        if not ctx.cache.exists(filename):
            status = StoredAssetStatus.PENDING
        else:
            try:
                page = StoredBillsPage.model_validate_json(ctx.cache.read_text(filename))
                status = StoredAssetStatus.PASS if len(page.bills) == expected else StoredAssetStatus.FAIL
            except ValueError:
                logger.warning(f"Bills list page failed to parse: {filename}")
                status = StoredAssetStatus.FAIL
        page_statuses.append(PageStatus(pageNumber=page_number, filename=filename, status=status))
    return page_statuses


class BillsListAsset(Asset):
    name = ASSET_NAME

    def policy(self, ctx: EngineContext, args: AssetArgs, deps_data) -> bool:
        (bills_count,) = deps_data
        page_statuses = get_bills_page_statuses(ctx, args, bills_count)
        meta_store.write(ctx.cache, args, {"pageStatuses": _dump(page_statuses), "lastChecked": now_ms()})
        return all(p.status == StoredAssetStatus.PASS for p in page_statuses)

    def read(self, ctx: EngineContext, args: AssetArgs) -> List[BillListItem]:
        pages = []
        for key in ctx.cache.list_files(get_dir_name(args)):
            match = _page_pattern.search(key)
            if match:
                pages.append((int(match.group(1)), key))
        bills: List[BillListItem] = []
        for _, key in sorted(pages):
            bills.extend(StoredBillsPage.model_validate_json(ctx.cache.read_text(key)).bills)
        return bills

    def create(self, ctx: EngineContext, args: AssetArgs, deps_data) -> None:
        (bills_count,) = deps_data
        chamber, congress = args.require(ASSET_NAME)
        logger.debug(f"creating {bills_count} bills with args {chamber}, {congress}")

        meta = meta_store.read(ctx.cache, args)
        if meta is None:
            raise MissingMetadataError(get_meta_file_name(args))
        page_statuses = [p.model_copy() for p in meta.pageStatuses]
        ctx.emit_safely({"type": "billsAssetAllPagesStatus", "pageStatuses": _dump(page_statuses)})

        pages_to_fetch = [p for p in page_statuses if p.status != StoredAssetStatus.PASS]
        logger.debug(f"we need to fetch pages {', '.join(str(p.pageNumber) for p in pages_to_fetch)}")
        url = f"/bill/{congress}/{bill_type_for_chamber(chamber)}"
        for page in pages_to_fetch:
            offset = page_number_to_offset(page.pageNumber, PAGE_SIZE_LIMIT)
            ctx.emit_safely({"type": "billsAssetPageStatus", "file": page.filename, "status": "FETCHING"})
            logger.debug(f"fetching {url} offset={offset}")
            try:
                response = ctx.api.fetch_json(
                    url, {"offset": offset, "limit": PAGE_SIZE_LIMIT}, BillListResponse, ASSET_NAME
                )
            except Exception:
                page.status = StoredAssetStatus.FAIL
                meta_store.write(ctx.cache, args, {"pageStatuses": _dump(page_statuses)})
                ctx.emit_safely({"type": "billsAssetPageStatus", "file": page.filename, "status": "FAIL"})
                raise
            ctx.cache.write_json(
                page.filename, {"bills": [b.model_dump(mode="json") for b in response.bills]}
            )
            page.status = StoredAssetStatus.PASS
            meta_store.write(ctx.cache, args, {"pageStatuses": _dump(page_statuses)})
            ctx.emit_safely({"type": "billsAssetPageStatus", "file": page.filename, "status": "PASS"})

        logger.debug(f"done writing files, added {len(pages_to_fetch)} pages")
        meta_store.write(
            ctx.cache,
            args,
            {
                "pageStatuses": _dump(get_bills_page_statuses(ctx, args, bills_count)),
                "lastCreated": now_ms(),
            },
        )

    def read_metadata(self, ctx: EngineContext, args: AssetArgs) -> Optional[BillsListMeta]:
        return meta_store.read(ctx.cache, args)


def _dump(page_statuses: List[PageStatus]) -> List[dict]:
    return [p.model_dump(mode="json") for p in page_statuses]
