"""Members Service models package.

Every model class must be listed here so SQLAlchemy's mapper registry and
Alembic see it on import.
"""

from services.members_service.models.participant import Participant  # noqa: F401

__all__ = [
    "Participant",
]
