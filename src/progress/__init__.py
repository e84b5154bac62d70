"""Course enrollment and lesson completion tracking.

Provides:
- Course enrollment management
- Idempotent lesson completion with monotonic progress
- The course completion transition (cascade, certificate, reward)
"""

from .models import (
    PROGRESS_TABLES_CQL,
    Enrollment,
    EnrollmentStatus,
)


__all__ = [
    "PROGRESS_TABLES_CQL",
    "Enrollment",
    "EnrollmentStatus",
]
