"""Materialization executor: runs one job to a terminal JobResult.

    START -> read dependency outputs -> policy(args, deps_data)
        policy passed -> read(args)              -> "read"
        policy failed -> create(args, deps_data) -> "created"

Anything raised on the way is caught here and returned as a failed result;
the runtime that dispatched the job observes failure through the return
value, never through an exception crossing the job boundary.
"""
import logging
from typing import Any, List

from chambress.assets.base import Asset, AssetArgs, EngineContext
from chambress.engine.types import JOB_CREATED, JOB_FAILED, JOB_READ, JobResult

logger = logging.getLogger("chambress.engine")

MATERIALIZED_MESSAGE = "Asset materialized"
FAILED_MESSAGE = "Asset failed"


def read_deps_data(asset: Asset, ctx: EngineContext, args: AssetArgs) -> List[Any]:
    return [dep.read(ctx, args) for dep in asset.deps]


def execute_job(asset: Asset, ctx: EngineContext, args: AssetArgs) -> JobResult:
    try:
        deps_data = read_deps_data(asset, ctx, args)
        if asset.policy(ctx, args, deps_data):
            logger.info(f"[{asset.name}] policy passed, reading cache")
            data = asset.read(ctx, args)
            return JobResult(status=JOB_READ, message=MATERIALIZED_MESSAGE, data=data)

        logger.info(f"[{asset.name}] policy failed, creating")
        asset.create(ctx, args, deps_data)
        logger.info(f"[{asset.name}] created")
        return JobResult(status=JOB_CREATED, message=MATERIALIZED_MESSAGE)
    except Exception as e:
        logger.error(f"[{asset.name}] failed: {e}")
        return JobResult(status=JOB_FAILED, message=FAILED_MESSAGE, data=str(e))
