"""Enterprise team membership and team invitation models."""

from datetime import datetime
from typing import Optional
import uuid

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin, timestamp_field


class TeamMember(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "enterprise_team_members"
    __table_args__ = (
        sa.UniqueConstraint("enterprise_id", "user_id", name="uq_team_member_enterprise_user"),
    )

    enterprise_id: uuid.UUID = Field(foreign_key="enterprises.id", nullable=False, index=True)
    user_id: uuid.UUID = Field(foreign_key="users.id", nullable=False, index=True)
    role: str = Field(nullable=False, default="viewer")  # viewer | editor | admin | owner
    status: str = Field(nullable=False, default="active")  # active | inactive
    invited_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    join_date: datetime = timestamp_field()


class TeamInvitation(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "enterprise_team_invitations"

    enterprise_id: uuid.UUID = Field(foreign_key="enterprises.id", nullable=False, index=True)
    email: str = Field(nullable=False, index=True)
    role: str = Field(nullable=False)  # viewer | editor | admin
    token: str = Field(unique=True, nullable=False, index=True)
    inviter_id: uuid.UUID = Field(foreign_key="users.id", nullable=False)
    expires_at: datetime = Field(nullable=False, sa_type=sa.DateTime(timezone=True))
    status: str = Field(default="pending", nullable=False)  # pending | accepted | expired | cancelled
    accepted_by: Optional[uuid.UUID] = Field(default=None, foreign_key="users.id")
    accepted_at: Optional[datetime] = Field(default=None, sa_type=sa.DateTime(timezone=True))
