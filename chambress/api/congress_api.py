"""Congress.gov API client with key rotation and a shared rate limiter.

Every request made by any asset goes through ``CongressAPIClient.fetch``,
which hands out keys round robin and waits on the ``RateLimiter`` before the
request leaves. The limiter spaces requests globally (not per key) by
``3600 / (keys * rate_limit_per_hour)`` seconds, using a timestamp store that
several worker processes can share.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, Iterable, Optional, Protocol, Type, TypeVar

import requests
from pydantic import BaseModel

from chambress.config import (
    CONGRESS_GOV_API_BASE_URL,
    CONGRESS_GOV_API_KEYS,
    RATE_LIMIT_PER_HOUR,
    RETRY_LIMIT,
)
from chambress.errors import AssetValidationError, MissingCredentialError

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("congress_api")

ModelT = TypeVar("ModelT", bound=BaseModel)


def calculate_min_interval(key_count: int, rate_limit_per_hour: int) -> float:
    """Minimum seconds between any two requests across all keys."""
    if key_count < 1:
        raise MissingCredentialError()
    return 3600 / (key_count * rate_limit_per_hour)


class ApiKeyRotator:
    """Hands out API keys round robin."""

    def __init__(self, api_keys: Iterable[str]):
        self.api_keys = [key for key in api_keys if key]
        if not self.api_keys:
            raise MissingCredentialError()
        self.index = 0
        self._lock = threading.Lock()

    def get_next_key(self) -> str:
        with self._lock:
            key = self.api_keys[self.index]
            self.index = (self.index + 1) % len(self.api_keys)
        return key


class TimestampStore(Protocol):
    """Where the last-call timestamp lives. Shared by every limiter using it."""

    def get(self) -> Optional[float]:
        ...

    def set(self, timestamp: float) -> None:
        ...

    def compare_and_set(self, expected: Optional[float], timestamp: float) -> bool:
        ...


class InMemoryTimestampStore:
    """Timestamp store for a single process."""

    def __init__(self):
        self._timestamp: Optional[float] = None
        self._lock = threading.Lock()

    def get(self) -> Optional[float]:
        return self._timestamp

    def set(self, timestamp: float) -> None:
        with self._lock:
            self._timestamp = timestamp

    def compare_and_set(self, expected: Optional[float], timestamp: float) -> bool:
        with self._lock:
            if self._timestamp != expected:
                return False
            self._timestamp = timestamp
            return True


class RateLimiter:
    """Enforces a global minimum interval between requests.

    ``acquire`` blocks until the interval since the last recorded call has
    elapsed, then claims the slot by swapping in the current time. ``release``
    records the time again once the request is done, whatever its outcome.
    """

    def __init__(
        self,
        key_count: int,
        rate_limit_per_hour: int = RATE_LIMIT_PER_HOUR,
        store: Optional[TimestampStore] = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.min_interval = calculate_min_interval(key_count, rate_limit_per_hour)
        self.store = store if store is not None else InMemoryTimestampStore()
        self.clock = clock
        self.sleep = sleep
        self._lock = threading.Lock()

    def acquire(self) -> float:
        with self._lock:
            while True:
                last_call = self.store.get()
                now = self.clock()
                if last_call is not None:
                    delta = now - last_call
                    if delta < self.min_interval:
                        self.sleep(self.min_interval - delta)
                        continue
                # another process may have fired in the meantime
                if self.store.compare_and_set(last_call, now):
                    return now

    def release(self) -> None:
        self.store.set(self.clock())

    def call(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        self.acquire()
        try:
            return func(*args, **kwargs)
        finally:
            self.release()


class CongressAPIClient:
    """Throttled, retrying client for api.congress.gov."""

    def __init__(
        self,
        api_keys: Optional[Iterable[str]] = None,
        base_url: str = CONGRESS_GOV_API_BASE_URL,
        rate_limiter: Optional[RateLimiter] = None,
        rate_limit_per_hour: int = RATE_LIMIT_PER_HOUR,
        retry_limit: int = RETRY_LIMIT,
        session: Optional[requests.Session] = None,
        timeout: int = 10,
    ):
        keys = list(api_keys) if api_keys is not None else list(CONGRESS_GOV_API_KEYS)
        self.rotator = ApiKeyRotator(keys)
        self.base_url = base_url.rstrip("/")
        self.rate_limiter = rate_limiter or RateLimiter(
            len(self.rotator.api_keys), rate_limit_per_hour
        )
        self.retry_limit = max(1, retry_limit)
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, route: str, params: Dict[str, Any], api_key: str) -> requests.Response:
        return self.session.get(
            f"{self.base_url}{route}",
            params=params,
            headers={"accept": "application/json", "x-api-key": api_key},
            timeout=self.timeout,
        )

    def fetch(self, route: str, params: Optional[Dict[str, Any]] = None) -> requests.Response:
        """
        Fetch a route, retrying failed responses.

        429 responses back off exponentially before retrying. Once the retry
        limit is reached the last response is returned as is, so callers can
        inspect its status.
        Args:
            route: API route, e.g. "/member" or "/bill/117/hr".
            params: Query parameters (offset, limit, ...).
        Returns:
            The last requests.Response received.
        """
        params = dict(params or {})
        api_key = self.rotator.get_next_key()
        response = None
        for attempt in range(1, self.retry_limit + 1):
            logger.debug(f"Fetching {route} {params} (attempt {attempt}/{self.retry_limit})")
            response = self.rate_limiter.call(self._request, route, params, api_key)
            if response.status_code == 200:
                return response
            if attempt == self.retry_limit:
                break
            if response.status_code == 429:
                backoff = (2 ** attempt) * self.rate_limiter.min_interval
                logger.warning(f"Rate limited on {route}, backing off {backoff:.2f}s")
                self.rate_limiter.sleep(backoff)
            else:
                logger.warning(
                    f"Failed to fetch {route}, status code: {response.status_code}, retrying"
                )
        logger.error(f"Failed to fetch {route} after {self.retry_limit} attempts, status code: {response.status_code}")
        return response

    def fetch_json(
        self,
        route: str,
        params: Optional[Dict[str, Any]],
        model: Type[ModelT],
        asset_name: str = "congress_api",
    ) -> ModelT:
        """Fetch a route and validate its JSON body against a pydantic model."""
        response = self.fetch(route, params)
        if response.status_code != 200:
            raise AssetValidationError(
                asset_name, f"{route} returned status {response.status_code}"
            )
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            raise AssetValidationError(asset_name, f"failed to parse response from {route}: {e}") from e


def bill_type_for_chamber(chamber: str) -> str:
    return "hr" if chamber == "HOUSE" else "s"
