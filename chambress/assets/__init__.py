"""Asset registry.

The registry is built once at import and is read-only afterwards.

Dependency tree (shared nodes appear once in the job graph):
- membersCount
- members → membersCount
- bioguides → members
- billsCount
- billsList → billsCount
- bills → billsCount
- report → bioguides, members, billsList, bills
"""
from typing import Dict, List

from chambress.assets.base import (
    CONGRESS_API_QUEUE,
    LOCAL_QUEUE,
    Asset,
    AssetArgs,
    Chamber,
    EngineContext,
    MetaStore,
    merge_meta,
)
from chambress.assets.bills import BillsAsset
from chambress.assets.bills_count import BillsCountAsset
from chambress.assets.bills_list import BillsListAsset
from chambress.assets.bioguides import BioguidesAsset
from chambress.assets.members import MembersAsset
from chambress.assets.members_count import MembersCountAsset
from chambress.assets.report import ReportAsset
from chambress.errors import UnknownAssetError

members_count_asset = MembersCountAsset()
members_asset = MembersAsset(deps=[members_count_asset])
bioguides_asset = BioguidesAsset(deps=[members_asset])
bills_count_asset = BillsCountAsset()
bills_list_asset = BillsListAsset(deps=[bills_count_asset])
bills_asset = BillsAsset(deps=[bills_count_asset])
report_asset = ReportAsset(deps=[bioguides_asset, members_asset, bills_list_asset, bills_asset])

ALL_ASSETS: Dict[str, Asset] = {
    asset.name: asset
    for asset in (
        members_count_asset,
        members_asset,
        bioguides_asset,
        bills_count_asset,
        bills_list_asset,
        bills_asset,
        report_asset,
    )
}


def get_asset(name: str) -> Asset:
    try:
        return ALL_ASSETS[name]
    except KeyError:
        raise UnknownAssetError(name) from None


def get_asset_names() -> List[str]:
    return list(ALL_ASSETS)


def is_asset_name(name: str) -> bool:
    return name in ALL_ASSETS


__all__ = [
    "ALL_ASSETS",
    "Asset",
    "AssetArgs",
    "CONGRESS_API_QUEUE",
    "Chamber",
    "EngineContext",
    "LOCAL_QUEUE",
    "MetaStore",
    "get_asset",
    "get_asset_names",
    "is_asset_name",
    "merge_meta",
]
