"""Payee (payment identity) model."""

from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import IntIdMixin, TimestampMixin


class Payee(IntIdMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "payees"

    name: str = Field(nullable=False)
    # External identifier sent to the payment portal; minted once, never reused.
    uuid: str = Field(unique=True, nullable=False)
    tipalti_completed: Optional[bool] = Field(
        default=False, sa_column_kwargs={"server_default": sa.false()}
    )
