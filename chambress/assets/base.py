"""Asset model: the declarative description of a cacheable artifact.

An asset is a named artifact with four operations:

- policy(ctx, args, deps_data) -> bool: True when the cached data is still
  valid and nothing needs to be (re)created. Policies also record what is
  missing in the asset's meta file so that create knows what to fetch.
- read(ctx, args): load the cached artifact, assuming it exists and is valid.
- create(ctx, args, deps_data): fetch/produce the artifact and persist it.
  Must be safe to re-run after a partial failure: it always works from the
  missing items recorded in meta, never from a clean slate.
- read_metadata(ctx, args): the last persisted meta record, or None.

Assets hold no control flow of their own; the engine decides when each
operation runs.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from chambress.utils.storage import CacheStorage

CONGRESS_API_QUEUE = "congress-api-asset-queue"
LOCAL_QUEUE = "local-asset-queue"
QUEUE_NAMES = (CONGRESS_API_QUEUE, LOCAL_QUEUE)


def is_queue_name(name: str) -> bool:
    return name in QUEUE_NAMES


class Chamber(str, Enum):
    HOUSE = "HOUSE"
    SENATE = "SENATE"


class StoredAssetStatus(str, Enum):
    PENDING = "PENDING"
    PASS = "PASS"
    FAIL = "FAIL"
    FETCHING = "FETCHING"


class AssetArgs(BaseModel):
    """Arguments shared by every job of one materialization request."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    chamber: Optional[Chamber] = None
    congress: Optional[int] = None

    def require(self, asset_name: str) -> tuple:
        """Return (chamber, congress), failing when either is missing."""
        if self.chamber is None or self.congress is None:
            raise ValueError(f"{asset_name} requires chamber and congress arguments")
        return self.chamber, self.congress


def _discard(event: Any) -> None:
    return None


@dataclass
class EngineContext:
    """What an asset operation may touch: progress channel, API client, cache."""

    api: Any = None
    cache: CacheStorage = field(default_factory=CacheStorage)
    emit: Callable[[Any], None] = _discard

    def emit_safely(self, event: Any) -> None:
        """Progress events are best effort; a broken observer never fails a job."""
        try:
            self.emit(event)
        except Exception as e:
            logging.getLogger("chambress.engine").warning(f"Dropped progress event: {e}")


class Asset(ABC):
    name: ClassVar[str]
    queue: ClassVar[str] = CONGRESS_API_QUEUE
    deps: Sequence["Asset"] = ()

    def __init__(self, deps: Sequence["Asset"] = ()):
        self.deps = tuple(deps)

    @abstractmethod
    def policy(self, ctx: EngineContext, args: AssetArgs, deps_data: List[Any]) -> bool:
        ...

    @abstractmethod
    def read(self, ctx: EngineContext, args: AssetArgs) -> Any:
        ...

    @abstractmethod
    def create(self, ctx: EngineContext, args: AssetArgs, deps_data: List[Any]) -> None:
        ...

    def read_metadata(self, ctx: EngineContext, args: AssetArgs) -> Optional[Any]:
        return None

    def __repr__(self) -> str:
        return f"<Asset {self.name}>"


# =============================================================================
# METADATA
# =============================================================================

def merge_meta(old: Optional[Dict[str, Any]], updates: Dict[str, Any], default: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Shallow-merge updates over the last known meta.

    Later keys win and lists are replaced, not concatenated. When there is no
    previous meta, the merge starts from ``default``.
    """
    base = old if old is not None else (default or {})
    merged = dict(base)
    merged.update(updates)
    return merged


MetaT = TypeVar("MetaT", bound=BaseModel)


class MetaStore(Generic[MetaT]):
    """Reads, merges and writes one asset kind's meta file."""

    def __init__(self, asset_name: str, model: Type[MetaT], default: MetaT, path_for: Callable[[AssetArgs], str]):
        self.asset_name = asset_name
        self.model = model
        self.default = default
        self.path_for = path_for
        self.logger = logging.getLogger(f"chambress.assets.{asset_name}")

    def read(self, cache: CacheStorage, args: AssetArgs) -> Optional[MetaT]:
        path = self.path_for(args)
        if not cache.exists(path):
            return None
        try:
            return self.model.model_validate(cache.read_json(path))
        except ValueError as e:
            self.logger.warning(f"Unreadable meta file {path}: {e}")
            return None

    def write(self, cache: CacheStorage, args: AssetArgs, updates: Dict[str, Any]) -> MetaT:
        old = self.read(cache, args)
        merged = merge_meta(
            old.model_dump(mode="json") if old is not None else None,
            updates,
            self.default.model_dump(mode="json"),
        )
        try:
            meta = self.model.model_validate(merged)
        except ValidationError as e:
            raise ValueError(f"{self.asset_name}: invalid meta update {updates}") from e
        path = self.path_for(args)
        self.logger.debug(f"writing {path}")
        cache.write_json(path, meta.model_dump(mode="json"))
        return meta


class PageStatus(BaseModel):
    pageNumber: int
    filename: str
    status: StoredAssetStatus


def page_count(total: int, page_size: int) -> int:
    return -(-total // page_size) if total > 0 else 0


def page_number_to_offset(page_number: int, page_size: int) -> int:
    return (page_number - 1) * page_size


def now_ms() -> int:
    return int(time.time() * 1000)
