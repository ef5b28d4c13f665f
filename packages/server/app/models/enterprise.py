"""Enterprise model (directory profile, claimable)."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Enterprise(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "enterprises"

    name: str = Field(nullable=False, index=True)
    description: Optional[str] = None
    category: str = Field(nullable=False)  # land_projects | capital_sources | open_source_tools | network_organizers
    location: Optional[str] = None
    website: Optional[str] = None
    contact_email: Optional[str] = Field(default=None, index=True)
    claim_status: str = Field(default="unclaimed", nullable=False, index=True)  # unclaimed | claimed | verified
    owner_user_id: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
