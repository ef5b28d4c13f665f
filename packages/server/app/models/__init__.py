# SQLModel definitions, imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .enterprise import Enterprise  # noqa: F401
from .person import Person  # noqa: F401
from .claim_invitation import ClaimInvitation  # noqa: F401
from .team_member import TeamMember, TeamInvitation  # noqa: F401
