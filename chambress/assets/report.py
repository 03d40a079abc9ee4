"""Report asset: a local summary of everything the API assets produced."""
import logging
from typing import Any, Dict

from chambress.assets.base import LOCAL_QUEUE, Asset, AssetArgs, EngineContext, now_ms

ASSET_NAME = "report"
logger = logging.getLogger(f"chambress.assets.{ASSET_NAME}")


def get_file_name(args: AssetArgs) -> str:
    if args.chamber is None or args.congress is None:
        return f"{ASSET_NAME}/{ASSET_NAME}.json"
    return f"{ASSET_NAME}/{args.congress}-{args.chamber}.json"


class ReportAsset(Asset):
    """Always rebuilt; it only reads cached dependency outputs."""

    name = ASSET_NAME
    queue = LOCAL_QUEUE

    def policy(self, ctx: EngineContext, args: AssetArgs, deps_data) -> bool:
        return False

    def read(self, ctx: EngineContext, args: AssetArgs) -> Dict[str, Any]:
        return ctx.cache.read_json(get_file_name(args))

    def create(self, ctx: EngineContext, args: AssetArgs, deps_data) -> None:
        counts = {
            dep.name: len(data) if hasattr(data, "__len__") else data
            for dep, data in zip(self.deps, deps_data)
        }
        report = {"args": args.model_dump(mode="json"), "counts": counts, "createdAt": now_ms()}
        logger.info(f"writing {get_file_name(args)}: {counts}")
        ctx.cache.write_json(get_file_name(args), report)
        ctx.emit_safely({"type": ASSET_NAME, "status": "COMPLETE"})
