"""Topological sort over the depends-on relation."""
from typing import Dict, List

from chambress.engine.types import JobGraph
from chambress.errors import CycleDetectedError

UNVISITED = 0
IN_PROGRESS = 1
DONE = 2


def sort_job_graph(graph: JobGraph) -> List[int]:
    """Order job ids so that every dependency comes before its dependents.

    Depth-first post-order with three-color marking. Reaching a job that is
    still in progress means a back edge, and the sort fails with
    CycleDetectedError instead of returning a truncated order.
    """
    depends_on: Dict[int, List[int]] = {job.id: [] for job in graph.jobs}
    for edge in graph.dependencies:
        depends_on.setdefault(edge.job, []).append(edge.dependsOn)
        depends_on.setdefault(edge.dependsOn, [])

    marks: Dict[int, int] = {job_id: UNVISITED for job_id in depends_on}
    order: List[int] = []

    for start in depends_on:
        if marks[start] != UNVISITED:
            continue
        marks[start] = IN_PROGRESS
        # (job, index of the next dependency to visit)
        stack = [(start, 0)]
        while stack:
            job_id, index = stack[-1]
            deps = depends_on[job_id]
            if index < len(deps):
                stack[-1] = (job_id, index + 1)
                dep = deps[index]
                if marks[dep] == IN_PROGRESS:
                    raise CycleDetectedError(dep)
                if marks[dep] == UNVISITED:
                    marks[dep] = IN_PROGRESS
                    stack.append((dep, 0))
                continue
            marks[job_id] = DONE
            order.append(job_id)
            stack.pop()

    return order
