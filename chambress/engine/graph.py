"""Graph builder: flattens an asset and its transitive deps into jobs and edges.

The dependency structure is a DAG, not a tree. A dependency shared by several
assets (billsCount under both billsList and bills) becomes a single job with
one edge per parent that declares it.
"""
import logging
from typing import Dict, List, Optional, Tuple

from chambress.assets.base import QUEUE_NAMES, Asset, AssetArgs, is_queue_name
from chambress.engine.types import JobConfig, JobEdge, JobGraph

logger = logging.getLogger("chambress.engine")


def _walk(root: Asset) -> Tuple[List[Asset], Dict[int, int], Dict[int, List[int]]]:
    """Walk ``root`` depth first with an explicit stack.

    Job ids are handed out on first visit, starting at 0 for the root. For
    every asset we track which parents already walked an edge into it, so
    each (parent, dependency) pair is followed and recorded once.
    """
    job_ids: Dict[int, int] = {id(root): 0}
    assets: List[Asset] = [root]
    # dependency key -> parent keys, in the order the edges were walked
    visited_from: Dict[int, List[int]] = {}

    stack: List[Asset] = [root]
    while stack:
        current = stack[-1]
        next_dep = None
        for dep in current.deps:
            if id(current) not in visited_from.get(id(dep), []):
                next_dep = dep
                break

        if next_dep is None:
            stack.pop()
            continue

        visited_from.setdefault(id(next_dep), []).append(id(current))
        if id(next_dep) not in job_ids:
            job_ids[id(next_dep)] = len(assets)
            assets.append(next_dep)
            stack.append(next_dep)

    return assets, job_ids, visited_from


def get_job_graph_for_asset(root: Asset, args: Optional[AssetArgs] = None) -> JobGraph:
    assets, job_ids, visited_from = _walk(root)
    for asset in assets:
        if not is_queue_name(asset.queue):
            raise ValueError(f"{asset.name}: unknown queue {asset.queue!r}, expected one of {QUEUE_NAMES}")
    jobs = [
        JobConfig(id=job_ids[id(asset)], name=asset.name, queue=asset.queue, args=args)
        for asset in assets
    ]
    dependencies = [
        JobEdge(job=job_ids[parent], dependsOn=job_ids[dep])
        for dep, parents in visited_from.items()
        for parent in parents
    ]
    logger.debug(f"Job graph for {root.name}: {len(jobs)} jobs, {len(dependencies)} edges")
    return JobGraph(jobs=jobs, dependencies=dependencies)


def get_assets_by_job_id(root: Asset) -> Dict[int, Asset]:
    """The asset instance behind each job id of ``get_job_graph_for_asset(root)``."""
    assets, _, _ = _walk(root)
    return dict(enumerate(assets))
