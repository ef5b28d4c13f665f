"""Enterprises, contacts, claim invitations and enterprise teams.

Revision ID: 0001_claims_and_teams
Revises:
Create Date: 2026-10-17 09:00:00.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "0001_claims_and_teams"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ts(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))


def _uuid(name: str, *fk, nullable: bool = True, **kw) -> sa.Column:
    return sa.Column(name, postgresql.UUID(as_uuid=True), *fk, nullable=nullable, **kw)


def upgrade() -> None:
    op.create_table(
        "users",
        _uuid("id", primary_key=True, nullable=False),
        sa.Column("email", sa.Text(), nullable=True, unique=True),
        sa.Column("first_name", sa.Text(), nullable=True),
        sa.Column("last_name", sa.Text(), nullable=True),
        sa.Column("role", sa.Text(), nullable=False, server_default="visitor"),
        _ts("created_at"),
    )

    op.create_table(
        "enterprises",
        _uuid("id", primary_key=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.Text(), nullable=False),
        sa.Column("location", sa.Text(), nullable=True),
        sa.Column("website", sa.Text(), nullable=True),
        sa.Column("contact_email", sa.Text(), nullable=True),
        sa.Column("claim_status", sa.Text(), nullable=False, server_default="unclaimed"),
        _uuid("owner_user_id", sa.ForeignKey("users.id")),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint(
            "claim_status IN ('unclaimed', 'claimed', 'verified')",
            name="ck_enterprises_claim_status",
        ),
    )
    op.create_index("ix_enterprises_name", "enterprises", ["name"])
    op.create_index("ix_enterprises_claim_status", "enterprises", ["claim_status"])
    op.create_index("ix_enterprises_contact_email", "enterprises", ["contact_email"])

    op.create_table(
        "people",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("enterprise_id", sa.ForeignKey("enterprises.id", ondelete="SET NULL")),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=True, unique=True),
        sa.Column("title", sa.Text(), nullable=True),
        sa.Column("invitation_status", sa.Text(), nullable=False, server_default="not_invited"),
        sa.Column("claim_status", sa.Text(), nullable=False, server_default="unclaimed"),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_people_enterprise_id", "people", ["enterprise_id"])

    op.create_table(
        "claim_invitations",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("enterprise_id", sa.ForeignKey("enterprises.id", ondelete="CASCADE"), nullable=False),
        _uuid("person_id", sa.ForeignKey("people.id", ondelete="SET NULL")),
        sa.Column("token", sa.Text(), nullable=False, unique=True),
        sa.Column("invited_email", sa.Text(), nullable=False),
        sa.Column("invited_name", sa.Text(), nullable=True),
        _uuid("invited_by", sa.ForeignKey("users.id")),
        _ts("invited_at"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending"),
        _uuid("accepted_by", sa.ForeignKey("users.id")),
        _ts("accepted_at", nullable=True),
    )
    op.create_index("ix_claim_invitations_enterprise_id", "claim_invitations", ["enterprise_id"])
    op.create_index("ix_claim_invitations_person_id", "claim_invitations", ["person_id"])
    op.create_index("ix_claim_invitations_status", "claim_invitations", ["status"])

    op.create_table(
        "enterprise_team_members",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("enterprise_id", sa.ForeignKey("enterprises.id", ondelete="CASCADE"), nullable=False),
        _uuid("user_id", sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("role", sa.Text(), nullable=False, server_default="viewer"),
        sa.Column("status", sa.Text(), nullable=False, server_default="active"),
        _uuid("invited_by", sa.ForeignKey("users.id")),
        _ts("join_date"),
        _ts("created_at"),
        _ts("updated_at"),
        sa.UniqueConstraint("enterprise_id", "user_id", name="uq_team_member_enterprise_user"),
        sa.CheckConstraint(
            "role IN ('viewer', 'editor', 'admin', 'owner')",
            name="ck_team_members_role",
        ),
    )
    op.create_index("ix_enterprise_team_members_enterprise_id", "enterprise_team_members", ["enterprise_id"])
    op.create_index("ix_enterprise_team_members_user_id", "enterprise_team_members", ["user_id"])

    op.create_table(
        "enterprise_team_invitations",
        _uuid("id", primary_key=True, nullable=False),
        _uuid("enterprise_id", sa.ForeignKey("enterprises.id", ondelete="CASCADE"), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("role", sa.Text(), nullable=False),
        sa.Column("token", sa.Text(), nullable=False, unique=True),
        _uuid("inviter_id", sa.ForeignKey("users.id"), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="pending"),
        _uuid("accepted_by", sa.ForeignKey("users.id")),
        _ts("accepted_at", nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_enterprise_team_invitations_enterprise_id", "enterprise_team_invitations", ["enterprise_id"])
    op.create_index("ix_enterprise_team_invitations_email", "enterprise_team_invitations", ["email"])


def downgrade() -> None:
    op.drop_table("enterprise_team_invitations")
    op.drop_table("enterprise_team_members")
    op.drop_table("claim_invitations")
    op.drop_table("people")
    op.drop_table("enterprises")
    op.drop_table("users")
