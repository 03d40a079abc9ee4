# API client for chambress

# congress_api.py: throttled, key-rotating client for api.congress.gov
# models.py: pydantic models for the response payloads the assets consume

from chambress.api.congress_api import (
    ApiKeyRotator,
    CongressAPIClient,
    InMemoryTimestampStore,
    RateLimiter,
    calculate_min_interval,
)

__all__ = [
    "ApiKeyRotator",
    "CongressAPIClient",
    "InMemoryTimestampStore",
    "RateLimiter",
    "calculate_min_interval",
]
