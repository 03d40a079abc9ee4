"""Dagster runtime: one op per job of a JobGraph, wired by its edges.

Dependencies become ``Nothing`` inputs, so Dagster orders the ops without
passing data between them; every op reads its dependency outputs from the
cache through the asset's ``read``. A failed JobResult is raised as a Dagster
``Failure`` so downstream ops are skipped by the run.

The rate limiter only spans processes through MongoDB. A job whose resource
keeps the last-call timestamp in memory runs every op in one process.
"""
from typing import Dict, List, Optional

from dagster import (
    DependencyDefinition,
    Failure,
    GraphDefinition,
    In,
    JobDefinition,
    MetadataValue,
    Nothing,
    OpDefinition,
    OpExecutionContext,
    in_process_executor,
    op,
)

from chambress.assets.base import Asset, AssetArgs
from chambress.engine.executor import execute_job
from chambress.engine.graph import get_assets_by_job_id, get_job_graph_for_asset
from chambress.engine.sort import sort_job_graph
from chambress.engine.types import JobConfig
from chambress.resources.congress import ChambressResource


def get_op_name(job: JobConfig) -> str:
    return f"{job.name}_{job.id}"


def _build_op(job: JobConfig, asset: Asset, dep_names: List[str]) -> OpDefinition:
    args = job.args or AssetArgs()

    @op(
        name=get_op_name(job),
        ins={f"after_{name}": In(Nothing) for name in dep_names},
        tags={"kind": "materialize", "queue": job.queue},
        description=f"Materialize the {job.name} asset",
    )
    def _materialize(context: OpExecutionContext, chambress: ChambressResource) -> dict:
        context.log.info("=" * 60)
        context.log.info(f"📦 MATERIALIZING {job.name} ({args.model_dump_json()})")
        context.log.info("=" * 60)

        ctx = chambress.build_context(emit=lambda event: context.log.debug(f"progress: {event}"))
        result = execute_job(asset, ctx, args)

        if not result.ok:
            context.log.error(f"❌ {job.name}: {result.message}: {result.data}")
            raise Failure(
                description=f"{job.name}: {result.data}",
                metadata={"message": MetadataValue.text(result.message)},
            )

        if result.status == "read":
            context.log.info(f"✅ {job.name}: cache valid, read")
        else:
            context.log.info(f"✅ {job.name}: created")
        return {"status": result.status, "message": result.message}

    return _materialize


def build_materialize_job(
    asset: Asset,
    args: Optional[AssetArgs] = None,
    name: Optional[str] = None,
    resource: Optional[ChambressResource] = None,
) -> JobDefinition:
    """Turn the job graph of ``asset`` into a runnable Dagster job.

    The graph is sorted first so that a dependency cycle fails here, before
    any definition is built.
    """
    args = args or AssetArgs()
    graph = get_job_graph_for_asset(asset, args)
    sorted_ids = sort_job_graph(graph)
    assets_by_id = get_assets_by_job_id(asset)

    op_names: Dict[int, str] = {job.id: get_op_name(job) for job in graph.jobs}
    node_defs = []
    dependencies: Dict[str, Dict[str, DependencyDefinition]] = {}
    for job_id in sorted_ids:
        job = graph.get_job(job_id)
        dep_names = [op_names[dep] for dep in graph.dependencies_of(job_id)]
        node_defs.append(_build_op(job, assets_by_id[job_id], dep_names))
        if dep_names:
            dependencies[op_names[job_id]] = {
                f"after_{dep_name}": DependencyDefinition(dep_name) for dep_name in dep_names
            }

    resource = resource or ChambressResource()
    executor_def = None if resource.shares_timestamps_across_processes else in_process_executor

    job_name = name or f"materialize_{asset.name}"
    return GraphDefinition(
        name=job_name,
        description=f"Materialize {asset.name} and its dependencies",
        node_defs=node_defs,
        dependencies=dependencies,
    ).to_job(
        resource_defs={"chambress": resource},
        executor_def=executor_def,
        tags={"asset": asset.name},
    )
