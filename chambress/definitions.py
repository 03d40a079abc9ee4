"""Dagster definitions for chambress.

Jobs:
- members_job → membersCount → members → bioguides
- report_job → every asset for CHAMBRESS_CHAMBER / CHAMBRESS_CONGRESS
- preflight_job → online API key validation

The resource keeps the last-call timestamp in MongoDB when MONGO_URI is set,
so concurrent runs share one request budget.
"""

from dagster import Definitions

from chambress.jobs import members_job, preflight_job, report_job
from chambress.resources import ChambressResource

# ============================================================================
# DEFINITIONS
# ============================================================================

defs = Definitions(
    jobs=[
        members_job,
        report_job,
        preflight_job,
    ],
    resources={
        "chambress": ChambressResource(),
    },
)
