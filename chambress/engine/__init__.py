# Materialization engine:
#   graph   asset tree -> JobGraph (shared deps become one job)
#   sort    JobGraph -> dependency-first job ids
#   flow    sorted jobs -> FlowJob tree for a queue runtime
#   executor  one job -> JobResult
#   runner  local worker pool over a FlowJob tree
from chambress.engine.executor import execute_job
from chambress.engine.flow import get_flow_for_job_list
from chambress.engine.graph import get_job_graph_for_asset
from chambress.engine.runner import materialize, run_flow
from chambress.engine.sort import sort_job_graph
from chambress.engine.types import FlowJob, JobConfig, JobEdge, JobGraph, JobResult

__all__ = [
    "FlowJob",
    "JobConfig",
    "JobEdge",
    "JobGraph",
    "JobResult",
    "execute_job",
    "get_flow_for_job_list",
    "get_job_graph_for_asset",
    "materialize",
    "run_flow",
    "sort_job_graph",
]
