"""Flow composer: sorted jobs to a nested parent/child execution tree."""
from typing import Dict, List, Optional, Tuple

from chambress.assets.base import AssetArgs
from chambress.engine.types import FlowJob, JobGraph


def get_flow_for_job_list(graph: JobGraph, sorted_ids: List[int], args: Optional[AssetArgs] = None) -> FlowJob:
    """Build the FlowJob tree rooted at the last sorted job.

    A job's children are its direct dependencies. Because ``sorted_ids`` puts
    dependencies first, every child is built before its parent. A shared
    dependency is one FlowJob object referenced from each parent. Every node
    carries the same ``args``.
    """
    if not sorted_ids:
        raise ValueError("Cannot build a flow from an empty job list")

    flows: Dict[int, FlowJob] = {}
    for job_id in sorted_ids:
        job = graph.get_job(job_id)
        children = [flows[dep] for dep in graph.dependencies_of(job_id)]
        flows[job_id] = FlowJob(
            name=job.name,
            queueName=job.queue,
            data={"id": job.id, "name": job.name, "args": args},
            children=children,
        )
    return flows[sorted_ids[-1]]


def iter_flow(flow: FlowJob) -> List[FlowJob]:
    """Every distinct node of a flow, children before parents."""
    seen: Dict[int, FlowJob] = {}
    # (node, index of the next child to visit)
    stack: List[Tuple[FlowJob, int]] = [(flow, 0)]
    while stack:
        node, index = stack.pop()
        if node.job_id in seen:
            continue
        if index < len(node.children):
            stack.append((node, index + 1))
            child = node.children[index]
            if child.job_id not in seen:
                stack.append((child, 0))
        else:
            seen[node.job_id] = node
    return list(seen.values())
