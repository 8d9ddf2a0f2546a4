"""Pydantic schemas for node responses."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from schemas.assoc_child import AssocChild


class UserInfo(BaseModel):
    """Display info for a node's creator or modifier."""

    id: str
    display_name: str


class PathElement(BaseModel):
    """One ancestor on a node's primary path."""

    id: str
    name: str


class PathInfo(BaseModel):
    """Primary path of a node, root first."""

    name: str
    is_complete: bool
    elements: list[PathElement]


class NodeResponse(BaseModel):
    """
    Node representation returned by list endpoints.

    Minimal by default; properties and path are only set when requested via
    the include parameter.
    """

    id: str
    name: str
    node_type: str
    is_folder: bool
    is_file: bool
    parent_id: str | None = None
    created_at: datetime
    modified_at: datetime
    created_by_user: UserInfo | None = None
    modified_by_user: UserInfo | None = None
    association: AssocChild | None = None
    properties: dict[str, Any] | None = None
    path: PathInfo | None = None


class NodeListResponse(BaseModel):
    """Schema for paginated node list responses."""

    items: list[NodeResponse]
    total: int
    offset: int
    limit: int
    has_more: bool
