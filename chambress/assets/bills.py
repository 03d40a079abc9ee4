"""
Bills asset: every bill of one chamber in one congress (e.g. the 117th Senate).

Policy: given a count of bills, for each bill number from 1 to the count the
bill file must, in sequence:
  (1) exist
  (2) be valid JSON
  (3) contain the expected keys (bill, actions, committees)
  (4) hold as many actions as the count reported by the bill detail
Any bill failing one of these is recorded in missingBillNumbers.
"""
import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from chambress.api.congress_api import bill_type_for_chamber
from chambress.api.models import (
    BillActionsResponse,
    BillCommitteesResponse,
    BillDetailResponse,
    StoredBill,
)
from chambress.assets.base import Asset, AssetArgs, EngineContext, MetaStore, now_ms
from chambress.config import PAGE_SIZE_LIMIT
from chambress.errors import MissingMetadataError

ASSET_NAME = "bills"
logger = logging.getLogger(f"chambress.assets.{ASSET_NAME}")


class BillsMeta(BaseModel):
    missingBillNumbers: List[int] = Field(default_factory=list)
    fullCount: int = 0
    lastChecked: Optional[int] = None
    lastCreated: Optional[int] = None


DEFAULT_META = BillsMeta()


def get_dir_name(args: AssetArgs) -> str:
    chamber, congress = args.require(ASSET_NAME)
    return f"{ASSET_NAME}/{congress}/{chamber}"


def get_file_name(args: AssetArgs, bill_number: int) -> str:
    return f"{get_dir_name(args)}/{bill_number}.json"


def get_meta_file_name(args: AssetArgs) -> str:
    chamber, congress = args.require(ASSET_NAME)
    return f"{ASSET_NAME}/{congress}/{chamber}-meta.json"


meta_store = MetaStore(ASSET_NAME, BillsMeta, DEFAULT_META, get_meta_file_name)


def policy_rollup(ctx: EngineContext, path: str) -> bool:
    if not ctx.cache.exists(path):
        return False
    try:
        data = json.loads(ctx.cache.read_text(path))
    except ValueError:
        return False
    if not isinstance(data, dict) or any(key not in data for key in ("bill", "actions", "committees")):
        return False
    bill_actions = data["bill"].get("actions") if isinstance(data["bill"], dict) else None
    if isinstance(bill_actions, dict) and bill_actions.get("count") is not None:
        if bill_actions["count"] != len(data["actions"]):
            return False
    return True


def fetch_bill_actions(ctx: EngineContext, congress: int, bill_type: str, bill_number: int) -> List[Dict[str, Any]]:
    """Fetch every page of a bill's actions."""
    url = f"/bill/{congress}/{bill_type}/{bill_number}/actions"
    offset = 0
    actions: List[Dict[str, Any]] = []
    while True:
        response = ctx.api.fetch_json(
            url, {"offset": offset, "limit": PAGE_SIZE_LIMIT}, BillActionsResponse, ASSET_NAME
        )
        actions.extend(response.actions)
        if response.pagination is None or not response.pagination.next:
            return actions
        offset += PAGE_SIZE_LIMIT


class BillsAsset(Asset):
    name = ASSET_NAME

    def policy(self, ctx: EngineContext, args: AssetArgs, deps_data) -> bool:
        (bills_count,) = deps_data
        missing = [
            bill_number
            for bill_number in range(1, bills_count + 1)
            if not policy_rollup(ctx, get_file_name(args, bill_number))
        ]
        meta_store.write(
            ctx.cache,
            args,
            {"missingBillNumbers": missing, "fullCount": bills_count, "lastChecked": now_ms()},
        )
        return len(missing) == 0

    def read(self, ctx: EngineContext, args: AssetArgs) -> List[StoredBill]:
        return [
            StoredBill.model_validate(ctx.cache.read_json(key))
            for key in ctx.cache.list_files(get_dir_name(args))
        ]

    def create(self, ctx: EngineContext, args: AssetArgs, deps_data) -> None:
        (bills_count,) = deps_data
        chamber, congress = args.require(ASSET_NAME)
        meta = meta_store.read(ctx.cache, args)
        if meta is None:
            raise MissingMetadataError(get_meta_file_name(args))
        remaining = list(meta.missingBillNumbers)
        logger.debug(
            f"Have {bills_count - len(remaining)} on file... creating {len(remaining)} bills "
            f"with args {chamber}, {congress}"
        )

        bill_type = bill_type_for_chamber(chamber)
        base_url = f"/bill/{congress}/{bill_type}"
        for bill_number in meta.missingBillNumbers:
            ctx.emit_safely({"type": ASSET_NAME, "billNumber": bill_number, "status": "FETCHING"})
            try:
                logger.debug(f"fetching bill details for {congress}-{bill_type}-{bill_number}")
                detail = ctx.api.fetch_json(
                    f"{base_url}/{bill_number}", {"offset": 0, "limit": PAGE_SIZE_LIMIT}, BillDetailResponse, ASSET_NAME
                )
                logger.debug(f"fetching actions for {congress}-{bill_type}-{bill_number}")
                actions = fetch_bill_actions(ctx, congress, bill_type, bill_number)
                logger.debug(f"fetching committees for {congress}-{bill_type}-{bill_number}")
                committees = ctx.api.fetch_json(
                    f"{base_url}/{bill_number}/committees",
                    {"offset": 0, "limit": PAGE_SIZE_LIMIT},
                    BillCommitteesResponse,
                    ASSET_NAME,
                )
            except Exception:
                ctx.emit_safely({"type": ASSET_NAME, "billNumber": bill_number, "status": "FAIL"})
                raise

            stored = StoredBill(bill=detail.bill, actions=actions, committees=committees.committees)
            file_name = get_file_name(args, bill_number)
            logger.debug(f"writing {file_name}")
            ctx.cache.write_json(file_name, stored.model_dump(mode="json"))
            remaining.remove(bill_number)
            meta_store.write(ctx.cache, args, {"missingBillNumbers": remaining})
            ctx.emit_safely({"type": ASSET_NAME, "billNumber": bill_number, "status": "SUCCESS"})

        meta_store.write(
            ctx.cache,
            args,
            {"missingBillNumbers": remaining, "fullCount": bills_count, "lastCreated": now_ms()},
        )

    def read_metadata(self, ctx: EngineContext, args: AssetArgs) -> Optional[BillsMeta]:
        return meta_store.read(ctx.cache, args)
