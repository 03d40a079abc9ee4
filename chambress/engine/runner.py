"""Local runtime for FlowJob trees, plus the materialize() entry point.

One bounded worker pool draws from the set of ready jobs: a job becomes
ready once every one of its children finished successfully. Jobs whose
children failed are never dispatched and are reported as skipped.
"""
import logging
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, Optional, Union

from chambress.api.congress_api import CongressAPIClient
from chambress.assets import get_asset
from chambress.assets.base import Asset, AssetArgs, EngineContext
from chambress.config import MAX_WORKERS
from chambress.engine.executor import execute_job
from chambress.engine.flow import get_flow_for_job_list, iter_flow
from chambress.engine.graph import get_assets_by_job_id, get_job_graph_for_asset
from chambress.engine.sort import sort_job_graph
from chambress.engine.types import JOB_FAILED, JOB_SKIPPED, FlowJob, JobResult

logger = logging.getLogger("chambress.engine")

ExecuteFn = Callable[[FlowJob], JobResult]


def run_flow(flow: FlowJob, execute: ExecuteFn, max_workers: int = MAX_WORKERS) -> Dict[int, JobResult]:
    """Run every node of ``flow`` with at most ``max_workers`` jobs in flight.

    Returns results keyed by job id. An exception escaping ``execute`` is
    recorded as a failed result for that job.
    """
    if max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    nodes = {node.job_id: node for node in iter_flow(flow)}
    pending = set(nodes)
    results: Dict[int, JobResult] = {}
    running: Dict[Future, int] = {}

    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="chambress") as pool:
        while pending or running:
            for job_id in sorted(pending):
                node = nodes[job_id]
                child_results = [results.get(child.job_id) for child in node.children]
                if any(r is None for r in child_results):
                    continue
                pending.discard(job_id)
                failed = [child.job_id for child, r in zip(node.children, child_results) if not r.ok]
                if failed:
                    logger.warning(f"Skipping {node.name} ({job_id}): dependencies {failed} did not succeed")
                    results[job_id] = JobResult(status=JOB_SKIPPED, message="Dependency failed", data=failed)
                    continue
                logger.debug(f"Dispatching {node.name} ({job_id}) on {node.queueName}")
                running[pool.submit(execute, node)] = job_id

            if not running:
                # skipping may have unblocked more parents
                continue

            done, _ = wait(running, return_when=FIRST_COMPLETED)
            for future in done:
                job_id = running.pop(future)
                try:
                    results[job_id] = future.result()
                except Exception as e:
                    logger.error(f"Job {nodes[job_id].name} ({job_id}) raised: {e}")
                    results[job_id] = JobResult(status=JOB_FAILED, message="Asset failed", data=str(e))

    return results


def materialize(
    name_or_asset: Union[str, Asset],
    args: Optional[AssetArgs] = None,
    ctx: Optional[EngineContext] = None,
    max_workers: int = MAX_WORKERS,
) -> Dict[int, JobResult]:
    """Build, sort and run the job graph for one asset in this process.

    Unknown names and dependency cycles raise before any job runs. Without
    ``ctx`` the jobs talk to Congress.gov with the configured keys, so missing
    keys raise MissingCredentialError here too.
    """
    asset = get_asset(name_or_asset) if isinstance(name_or_asset, str) else name_or_asset
    args = args or AssetArgs()
    if ctx is None:
        ctx = EngineContext(api=CongressAPIClient())

    graph = get_job_graph_for_asset(asset, args)
    sorted_ids = sort_job_graph(graph)
    flow = get_flow_for_job_list(graph, sorted_ids, args)

    assets_by_id = get_assets_by_job_id(asset)
    logger.info(f"Materializing {asset.name}: {len(graph.jobs)} jobs")

    def execute(node: FlowJob) -> JobResult:
        return execute_job(assets_by_id[node.job_id], ctx, node.data["args"])

    return run_flow(flow, execute, max_workers)

