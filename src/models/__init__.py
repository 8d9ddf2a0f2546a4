"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.user import User
from models.node import Node
from models.child_association import ChildAssociation

__all__ = [
    "Base",
    "ChildAssociation",
    "Node",
    "TimestampMixin",
    "UUIDv7Mixin",
    "User",
]
