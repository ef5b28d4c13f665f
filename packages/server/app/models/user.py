"""User model."""

from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel

from .base import UUIDMixin, timestamp_field


class User(UUIDMixin, SQLModel, table=True):
    __tablename__ = "users"

    email: Optional[str] = Field(default=None, unique=True, index=True)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str = Field(nullable=False, default="visitor")  # visitor | member | enterprise_owner | admin
    created_at: datetime = timestamp_field()
