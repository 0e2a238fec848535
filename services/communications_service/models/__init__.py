"""Communications Service models package."""

from services.communications_service.models.core import Notification  # noqa: F401
from services.communications_service.models.enums import NotificationType  # noqa: F401

__all__ = [
    "Notification",
    "NotificationType",
]
