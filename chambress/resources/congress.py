"""Congress.gov engine resource for Dagster.

Builds the EngineContext every materialization op runs with: the cache root,
and a CongressAPIClient whose rate limiter shares its last-call timestamp
with every other limiter pointed at the same store.

Without a MongoDB connection string the timestamp lives in process memory
and is only shared by callers in this process, so jobs built on such a
resource run their ops in process. With one, it lives in MongoDB and is
shared by every worker process.
"""

from typing import Any, Callable, List, Optional

from dagster import ConfigurableResource

from chambress.api.congress_api import CongressAPIClient, InMemoryTimestampStore, RateLimiter
from chambress.assets.base import EngineContext
from chambress.config import (
    CONGRESS_GOV_API_BASE_URL,
    CONGRESS_GOV_API_KEYS,
    MONGO_DB,
    MONGO_URI,
    RATE_LIMIT_PER_HOUR,
    RETRY_LIMIT,
)
from chambress.resources.mongo import MongoDBResource, MongoTimestampStore
from chambress.utils.storage import CacheStorage

_process_timestamps = InMemoryTimestampStore()


class ChambressResource(ConfigurableResource):
    """
    Dagster resource wiring the engine to the Congress.gov API and the cache.

    Usage in op:
        @op
        def my_op(chambress: ChambressResource):
            ctx = chambress.build_context()
            members_count_asset.policy(ctx, args, [])
    """

    api_keys: List[str] = list(CONGRESS_GOV_API_KEYS)
    base_url: str = CONGRESS_GOV_API_BASE_URL
    rate_limit_per_hour: int = RATE_LIMIT_PER_HOUR
    retry_limit: int = RETRY_LIMIT
    cache_dir: Optional[str] = None
    """Cache root; falls back to CHAMBRESS_CACHE_DIR, then ./data"""

    mongo_uri: Optional[str] = MONGO_URI
    """MongoDB holding the shared last-call timestamp; in-process when unset"""

    mongo_db: str = MONGO_DB

    @property
    def shares_timestamps_across_processes(self) -> bool:
        return bool(self.mongo_uri)

    def get_timestamp_store(self):
        if self.shares_timestamps_across_processes:
            mongo = MongoDBResource(connection_string=self.mongo_uri, database_name=self.mongo_db)
            return MongoTimestampStore(mongo)
        return _process_timestamps

    def get_api_client(self) -> CongressAPIClient:
        rate_limiter = RateLimiter(
            len([key for key in self.api_keys if key]),
            self.rate_limit_per_hour,
            store=self.get_timestamp_store(),
        )
        return CongressAPIClient(
            api_keys=self.api_keys,
            base_url=self.base_url,
            rate_limiter=rate_limiter,
            retry_limit=self.retry_limit,
        )

    def build_context(self, emit: Optional[Callable[[Any], None]] = None) -> EngineContext:
        ctx = EngineContext(api=self.get_api_client(), cache=CacheStorage(self.cache_dir))
        if emit is not None:
            ctx.emit = emit
        return ctx
