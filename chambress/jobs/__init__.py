"""Export job definitions for chambress.

- members_job: member list, member count and per-member bioguide records
- report_job: everything, for the default chamber and congress
- preflight_job: online key validation
"""

from chambress.assets import bioguides_asset, report_asset
from chambress.assets.base import AssetArgs
from chambress.config import DEFAULT_CHAMBER, DEFAULT_CONGRESS
from chambress.engine.dagster_job import build_materialize_job
from chambress.jobs.preflight import preflight_job

members_job = build_materialize_job(bioguides_asset, name="members_job")

report_job = build_materialize_job(
    report_asset,
    AssetArgs(chamber=DEFAULT_CHAMBER, congress=DEFAULT_CONGRESS),
    name="report_job",
)

__all__ = [
    "members_job",
    "preflight_job",
    "report_job",
]
