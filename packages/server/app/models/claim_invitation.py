"""Claim invitation model (token that lets a contact take ownership of an enterprise)."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import UUIDMixin, timestamp_field


class ClaimInvitation(UUIDMixin, SQLModel, table=True):
    __tablename__ = "claim_invitations"

    enterprise_id: uuid.UUID = Field(foreign_key="enterprises.id", nullable=False, index=True)
    person_id: Optional[uuid.UUID] = Field(default=None, foreign_key="people.id", index=True)
    token: str = Field(unique=True, nullable=False, index=True)
    invited_email: str = Field(nullable=False)
    invited_name: Optional[str] = None
    invited_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    invited_at: datetime = timestamp_field()
    expires_at: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
    status: str = Field(default="pending", nullable=False, index=True)  # pending | accepted | expired
    accepted_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    accepted_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
