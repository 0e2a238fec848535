"""Enrollments Service models package."""

from services.enrollments_service.models.enrollment import (  # noqa: F401
    Enrollment,
    enrollment_id_for,
)
from services.enrollments_service.models.enums import (  # noqa: F401
    EnrollmentStatus,
    PaymentSource,
)

__all__ = ["Enrollment", "EnrollmentStatus", "PaymentSource", "enrollment_id_for"]
