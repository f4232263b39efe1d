"""Durable record of a single global option."""

from __future__ import annotations

from typing import ClassVar, Optional

from sqlalchemy import Text
from sqlmodel import Field, SQLModel

AUTOLOAD_YES = "yes"
AUTOLOAD_NO = "no"


class GlobalOption(SQLModel, table=True):
    """Named value shared across all tenants.

    ``value`` always holds the canonical encoding produced by
    :func:`global_options.serialization.maybe_serialize`; ``id`` is
    only used for display ordering.
    """

    __tablename__: ClassVar[str] = "global_options"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True, index=True, nullable=False, max_length=191)
    value: str = Field(default="", nullable=False, sa_type=Text)
    autoload: str = Field(default=AUTOLOAD_YES, nullable=False, max_length=20)
