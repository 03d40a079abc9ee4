"""Centralized cache storage for chambress.

Every asset persists its data and its meta record under a single cache root,
keyed by paths built from the asset name and its arguments:

Structure:
    ./data/
    ├── membersCount/
    │   ├── membersCount.txt
    │   └── membersCount-meta.json
    ├── members/
    │   ├── members-1.json
    │   ├── ...
    │   └── members-meta.json
    ├── bioguides/
    │   └── A000001.json
    ├── bioguides-meta.json
    ├── billsCount/
    │   └── 117-HOUSE.txt
    ├── billsList/
    │   └── 117/HOUSE/page-1.json
    └── bills/
        └── 117/HOUSE/1.json
"""

import json
import os
from pathlib import Path
from typing import Any, List, Optional, Union

# Environment variable override (for containerized environments)
CACHE_ROOT_ENV = "CHAMBRESS_CACHE_DIR"

DEFAULT_CACHE_ROOT = Path("./data")


def get_cache_root() -> Path:
    """Get the root cache directory.

    Priority:
        1. CHAMBRESS_CACHE_DIR env var
        2. ./data/
    """
    env_root = os.environ.get(CACHE_ROOT_ENV)
    if env_root:
        return Path(env_root)
    return DEFAULT_CACHE_ROOT


class CacheStorage:
    """File-backed key-value storage keyed by relative path strings."""

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root) if root is not None else get_cache_root()

    def path(self, key: str) -> Path:
        return self.root / key

    def exists(self, key: str) -> bool:
        return self.path(key).is_file()

    def read_text(self, key: str) -> str:
        return self.path(key).read_text(encoding="utf-8")

    def write_text(self, key: str, text: str) -> None:
        """Write a file, creating parent directories as needed."""
        target = self.path(key)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")

    def read_json(self, key: str) -> Any:
        return json.loads(self.read_text(key))

    def write_json(self, key: str, data: Any) -> None:
        self.write_text(key, json.dumps(data))

    def list_files(self, directory: str) -> List[str]:
        """List file keys directly inside a directory, sorted by name."""
        target = self.path(directory)
        if not target.is_dir():
            return []
        return sorted(
            f"{directory}/{entry.name}" for entry in target.iterdir() if entry.is_file()
        )

    def get_storage_info(self) -> dict:
        """Get information about current storage configuration."""
        return {
            "cache_root": str(self.root),
            "cache_root_exists": self.root.exists(),
            "env_overrides": {
                CACHE_ROOT_ENV: os.environ.get(CACHE_ROOT_ENV),
            },
        }


def is_valid_json(text: str) -> bool:
    try:
        json.loads(text)
    except ValueError:
        return False
    return True
