"""Shared preflight and API key validation utilities.

Provides a presence check on the configured Congress.gov keys (safe at
startup, no network) and an optional online validation that spends one
request per key, used by the preflight job.
"""
import time
from typing import Iterable, List, Optional, Tuple

import requests

from chambress.config import CONGRESS_GOV_API_BASE_URL, CONGRESS_GOV_API_KEYS


def _request_with_retries(url, *, params=None, headers=None, timeout=10, retries=3, backoff_factor=1.0):
    for attempt in range(1, retries + 1):
        try:
            return requests.get(url, params=params, headers=headers, timeout=timeout)
        except requests.RequestException as exc:
            wait = backoff_factor * (2 ** (attempt - 1))
            print(f"[preflight] Request failed (attempt {attempt}/{retries}): {exc}. Retrying in {wait}s...")
            if attempt == retries:
                raise
            time.sleep(wait)


def _mask(key: str) -> str:
    return f"{key[:4]}..." if len(key) > 4 else "****"


def check_keys_presence(api_keys: Optional[Iterable[str]] = None) -> Tuple[bool, List[str]]:
    """Check that at least one Congress.gov key is configured.

    Returns (ok, errors).
    """
    keys = list(CONGRESS_GOV_API_KEYS if api_keys is None else api_keys)
    errors: List[str] = []
    if not [key for key in keys if key]:
        errors.append("CONGRESS_GOV_API_KEYS missing")
    return (len(errors) == 0, errors)


def validate_api_keys(
    online: bool = False,
    api_keys: Optional[Iterable[str]] = None,
    base_url: str = CONGRESS_GOV_API_BASE_URL,
) -> Tuple[bool, List[str]]:
    """Validate API keys. If online is False, do presence-only checks.

    If online is True, requests /member?limit=1 once per key to detect
    rejected keys. Returns (ok, errors).
    """
    keys = list(CONGRESS_GOV_API_KEYS if api_keys is None else api_keys)
    ok, errors = check_keys_presence(keys)
    if not online or not ok:
        return ok, errors

    for key in keys:
        try:
            resp = _request_with_retries(
                f"{base_url.rstrip('/')}/member",
                headers={"x-api-key": key, "accept": "application/json"},
                params={"limit": 1},
                retries=2,
            )
            if resp.status_code in (401, 403):
                errors.append(f"Congress API returned {resp.status_code} for key {_mask(key)}; text={resp.text[:200]}")
        except requests.RequestException as e:
            errors.append(f"Congress API check failed for key {_mask(key)}: {e}")

    return (len(errors) == 0, errors)
