"""Preflight job: validates the configured Congress.gov keys online."""
from dagster import OpExecutionContext, job, op

from chambress.utils import preflight


@op(
    tags={"kind": "validation"},
    description="Validates Congress.gov API keys by performing online connectivity checks",
)
def validate_api_keys(context: OpExecutionContext) -> dict:
    """Validate every configured key with one request each.

    Returns:
        dict: Validation results
    """
    context.log.info("=" * 60)
    context.log.info("🔍 API VALIDATION STARTED")
    context.log.info("=" * 60)

    ok, errors = preflight.validate_api_keys(online=True)
    results = {"success": ok, "errors": errors}

    if ok:
        context.log.info("✅ Congress API: PASSED")
        context.log.info("=" * 60)
    else:
        context.log.error("❌ API VALIDATION FAILED")
        for error in errors:
            context.log.error(f"  ✗ {error}")
        context.log.error("=" * 60)
        raise RuntimeError(f"API validation failed with {len(errors)} error(s)")

    return results


@job(
    description="Test the Congress.gov API keys",
    tags={"team": "data", "priority": "high"},
)
def preflight_job():
    validate_api_keys()
