"""ChildAssociation model for parent-child edges between nodes."""
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class ChildAssociation(Base, UUIDv7Mixin, TimestampMixin):
    """
    Directed parent -> child edge.

    Every non-root node has exactly one primary edge (its canonical location)
    and zero or more secondary edges (multi-filing). Both QName columns hold
    the full '{uri}local' form.
    """

    __tablename__ = "child_associations"

    parent_id: Mapped[UUID] = mapped_column(
        ForeignKey("nodes.id", ondelete="CASCADE"),
        nullable=False,
    )
    child_id: Mapped[UUID] = mapped_column(
        ForeignKey("nodes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type_qname: Mapped[str] = mapped_column(String(255), nullable=False)
    qname: Mapped[str] = mapped_column(String(255), nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (
        # The same child may be linked to a parent once per association type
        UniqueConstraint(
            "parent_id", "child_id", "type_qname",
            name="uq_child_assoc_parent_child_type",
        ),
        # Child names are unique per parent and association type
        UniqueConstraint(
            "parent_id", "type_qname", "qname",
            name="uq_child_assoc_parent_type_name",
        ),
        CheckConstraint("parent_id <> child_id", name="ck_child_assoc_no_self_reference"),
        # At most one primary parent per child
        Index(
            "uq_child_assoc_primary_child",
            "child_id",
            unique=True,
            postgresql_where=text("is_primary"),
            sqlite_where=text("is_primary = 1"),
        ),
        Index("ix_child_assoc_parent", "parent_id", "type_qname"),
    )
