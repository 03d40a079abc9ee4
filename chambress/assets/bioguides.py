"""Bioguides asset: the full /member/{bioguideId} record for every member."""
import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from chambress.api.models import AllMember, Member, MemberResponse
from chambress.assets.base import Asset, AssetArgs, EngineContext, MetaStore, now_ms
from chambress.errors import MissingMetadataError

ASSET_NAME = "bioguides"
logger = logging.getLogger(f"chambress.assets.{ASSET_NAME}")


class BioguidesMeta(BaseModel):
    missingBioguides: List[str] = Field(default_factory=list)
    lastChecked: Optional[int] = None
    lastCreated: Optional[int] = None


DEFAULT_META = BioguidesMeta()


def get_file_name(bioguide_id: str) -> str:
    return f"{ASSET_NAME}/{bioguide_id}.json"


def get_meta_file_name(args: AssetArgs) -> str:
    return f"{ASSET_NAME}-meta.json"


meta_store = MetaStore(ASSET_NAME, BioguidesMeta, DEFAULT_META, get_meta_file_name)


class BioguidesAsset(Asset):
    name = ASSET_NAME

    def policy(self, ctx: EngineContext, args: AssetArgs, deps_data) -> bool:
        members: List[AllMember] = deps_data[0]
        missing = [
            member.bioguideId
            for member in members
            if not ctx.cache.exists(get_file_name(member.bioguideId))
        ]
        meta_store.write(ctx.cache, args, {"missingBioguides": missing, "lastChecked": now_ms()})
        return len(missing) == 0

    def read(self, ctx: EngineContext, args: AssetArgs) -> List[Member]:
        return [
            Member.model_validate(ctx.cache.read_json(key))
            for key in ctx.cache.list_files(ASSET_NAME)
        ]

    def create(self, ctx: EngineContext, args: AssetArgs, deps_data) -> None:
        meta = meta_store.read(ctx.cache, args)
        if meta is None:
            raise MissingMetadataError(get_meta_file_name(args))
        remaining = list(meta.missingBioguides)

        for bioguide_id in meta.missingBioguides:
            ctx.emit_safely({"type": ASSET_NAME, "bioguideId": bioguide_id, "status": "FETCHING"})
            logger.debug(f"fetching {bioguide_id}")
            response = ctx.api.fetch_json(f"/member/{bioguide_id}", None, MemberResponse, ASSET_NAME)
            ctx.cache.write_json(get_file_name(bioguide_id), response.member.model_dump(mode="json"))
            remaining.remove(bioguide_id)
            meta_store.write(ctx.cache, args, {"missingBioguides": remaining})
            ctx.emit_safely({"type": ASSET_NAME, "bioguideId": bioguide_id, "status": "SUCCESS"})

        meta_store.write(ctx.cache, args, {"missingBioguides": remaining, "lastCreated": now_ms()})

    def read_metadata(self, ctx: EngineContext, args: AssetArgs) -> Optional[BioguidesMeta]:
        return meta_store.read(ctx.cache, args)
