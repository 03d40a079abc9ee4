"""Pydantic models for Congress.gov API responses.

Only the fields the assets rely on are declared; everything else the API
returns is kept (extra="allow") so cached files round-trip the full payload.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    model_config = ConfigDict(extra="allow")


class Pagination(ApiModel):
    count: int
    next: Optional[str] = None


# =============================================================================
# MEMBERS
# =============================================================================

class AllMember(ApiModel):
    """A member entry from the /member list endpoint."""

    bioguideId: str
    name: Optional[str] = None
    state: Optional[str] = None
    partyName: Optional[str] = None


class AllMemberResponse(ApiModel):
    members: List[AllMember]
    pagination: Pagination


class Member(ApiModel):
    """Full member record from /member/{bioguideId}."""

    bioguideId: str


class MemberResponse(ApiModel):
    member: Member


# =============================================================================
# BILLS
# =============================================================================

class BillListItem(ApiModel):
    number: int
    congress: Optional[int] = None
    type: Optional[str] = None
    title: Optional[str] = None


class BillListResponse(ApiModel):
    bills: List[BillListItem]
    pagination: Pagination


class CountRef(ApiModel):
    count: int
    url: Optional[str] = None


class BillDetail(ApiModel):
    number: int
    congress: Optional[int] = None
    title: Optional[str] = None
    actions: Optional[CountRef] = None


class BillDetailResponse(ApiModel):
    bill: BillDetail


class BillActionsResponse(ApiModel):
    actions: List[Dict[str, Any]]
    pagination: Optional[Pagination] = None


class BillCommitteesResponse(ApiModel):
    committees: List[Dict[str, Any]]


class StoredBill(ApiModel):
    """A bill as cached on disk: detail, every action and its committees."""

    bill: BillDetail
    actions: List[Dict[str, Any]] = Field(default_factory=list)
    committees: List[Dict[str, Any]] = Field(default_factory=list)
