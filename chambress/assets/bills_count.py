"""Bills count asset: number of bills of one chamber in one congress."""
import logging
from typing import Optional

from pydantic import BaseModel

from chambress.api.congress_api import bill_type_for_chamber
from chambress.api.models import BillListResponse
from chambress.assets.base import Asset, AssetArgs, EngineContext, MetaStore, now_ms
from chambress.errors import AssetValidationError

ASSET_NAME = "billsCount"
logger = logging.getLogger(f"chambress.assets.{ASSET_NAME}")


class BillsCountMeta(BaseModel):
    fileExists: bool
    lastChecked: Optional[int] = None
    lastCreated: Optional[int] = None


DEFAULT_META = BillsCountMeta(fileExists=False)


def get_file_name(args: AssetArgs) -> str:
    chamber, congress = args.require(ASSET_NAME)
    return f"{ASSET_NAME}/{congress}-{chamber}.txt"


def get_meta_file_name(args: AssetArgs) -> str:
    chamber, congress = args.require(ASSET_NAME)
    return f"{ASSET_NAME}/{congress}-{chamber}-meta.json"


meta_store = MetaStore(ASSET_NAME, BillsCountMeta, DEFAULT_META, get_meta_file_name)


class BillsCountAsset(Asset):
    name = ASSET_NAME

    def policy(self, ctx: EngineContext, args: AssetArgs, deps_data) -> bool:
        file_exists = ctx.cache.exists(get_file_name(args))
        meta_store.write(ctx.cache, args, {"fileExists": file_exists, "lastChecked": now_ms()})
        return file_exists

    def read(self, ctx: EngineContext, args: AssetArgs) -> int:
        text = ctx.cache.read_text(get_file_name(args))
        try:
            return int(text)
        except ValueError as e:
            raise AssetValidationError(ASSET_NAME, f"count file is not an integer: {text!r}") from e

    def create(self, ctx: EngineContext, args: AssetArgs, deps_data) -> None:
        chamber, congress = args.require(ASSET_NAME)
        url = f"/bill/{congress}/{bill_type_for_chamber(chamber)}"
        logger.debug(f"fetching {url}")
        ctx.emit_safely({"type": ASSET_NAME, "status": "FETCHING"})
        response = ctx.api.fetch_json(url, {"limit": 1}, BillListResponse, ASSET_NAME)
        logger.debug(f"writing {get_file_name(args)}")
        ctx.cache.write_text(get_file_name(args), str(response.pagination.count))
        meta_store.write(ctx.cache, args, {"fileExists": True, "lastCreated": now_ms()})
        ctx.emit_safely({"type": ASSET_NAME, "status": "COMPLETE"})

    def read_metadata(self, ctx: EngineContext, args: AssetArgs) -> Optional[BillsCountMeta]:
        return meta_store.read(ctx.cache, args)
