"""Node model for repository folders and documents."""
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class Node(Base, UUIDv7Mixin, TimestampMixin):
    """
    A node in the content repository.

    Parent/child structure lives in child_associations; a node has one primary
    parent (none for the root) and any number of secondary parents.
    """

    __tablename__ = "nodes"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Full QName string, e.g. '{http://www.alfresco.org/model/content/1.0}folder'
    node_type: Mapped[str] = mapped_column(String(255), nullable=False)
    properties: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    is_root: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    modified_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
