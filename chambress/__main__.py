"""
Prints the asset registry and the job plan for the report asset on startup.

No request is sent; use the preflight job for an online key check.
"""
from chambress.assets import ALL_ASSETS, report_asset
from chambress.assets.base import AssetArgs
from chambress.config import DEFAULT_CHAMBER, DEFAULT_CONGRESS
from chambress.engine.graph import get_job_graph_for_asset
from chambress.engine.sort import sort_job_graph
from chambress.utils import preflight


def main() -> int:
    print("Registered assets:")
    for name, asset in ALL_ASSETS.items():
        deps = ", ".join(dep.name for dep in asset.deps) or "-"
        print(f"  {name:<14} queue={asset.queue:<26} deps={deps}")

    args = AssetArgs(chamber=DEFAULT_CHAMBER, congress=DEFAULT_CONGRESS)
    graph = get_job_graph_for_asset(report_asset, args)
    print(f"\nPlan for {report_asset.name} ({args.chamber} {args.congress}):")
    for position, job_id in enumerate(sort_job_graph(graph), start=1):
        job = graph.get_job(job_id)
        deps = ", ".join(str(dep) for dep in graph.dependencies_of(job_id)) or "-"
        print(f"  {position}. [{job.id}] {job.name} (after {deps})")

    ok, errors = preflight.check_keys_presence()
    if not ok:
        print("\nPreflight failed:")
        for e in errors:
            print(f" - {e}")
        return 2
    print("\nPreflight: API keys present")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
