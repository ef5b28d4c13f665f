"""Person (CRM contact) model."""

from typing import Optional
import uuid

from sqlmodel import Field, SQLModel

from .base import TimestampMixin, UUIDMixin


class Person(UUIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "people"

    enterprise_id: Optional[uuid.UUID] = Field(default=None, foreign_key="enterprises.id", index=True)
    first_name: str = Field(nullable=False)
    last_name: str = Field(nullable=False)
    email: Optional[str] = Field(default=None, unique=True, index=True)
    title: Optional[str] = None
    invitation_status: str = Field(default="not_invited", nullable=False)  # not_invited | invited | signed_up | active
    claim_status: str = Field(default="unclaimed", nullable=False)  # unclaimed | claimed | verified

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
