"""User model for node creators and modifiers."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin, UUIDv7Mixin


class User(Base, UUIDv7Mixin, TimestampMixin):
    """Repository user, referenced by nodes as creator and last modifier."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @property
    def display_name(self) -> str:
        """Full name when known, otherwise the username."""
        full_name = " ".join(n for n in (self.first_name, self.last_name) if n)
        return full_name or self.username
