"""User model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import IntIdMixin, TimestampMixin


class User(IntIdMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: str = Field(unique=True, index=True, nullable=False)
    title: Optional[str] = None
    roles_mask: int = Field(default=0, nullable=False)  # UserRole flags
    # Embedded in session tokens; rotating it revokes every outstanding token.
    jwt_secret: str = Field(nullable=False)
