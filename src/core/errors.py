"""Domain errors shared by every learning feature.

Services raise these; the API layer turns them into an ``ActionResult``
failure envelope with the matching HTTP status.
"""

from enum import StrEnum

from fastapi import status


class ErrorCode(StrEnum):
    """Machine-readable failure kinds."""

    UNAUTHENTICATED = "unauthenticated"
    ACCESS_DENIED = "access_denied"
    NOT_ENROLLED = "not_enrolled"
    ALREADY_ENROLLED = "already_enrolled"
    ATTEMPT_LIMIT_REACHED = "attempt_limit_reached"
    ALREADY_SUBMITTED = "already_submitted"
    OUT_OF_RANGE = "out_of_range"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    INTERNAL_ERROR = "internal_error"


STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.NOT_ENROLLED: status.HTTP_403_FORBIDDEN,
    ErrorCode.ALREADY_ENROLLED: status.HTTP_409_CONFLICT,
    ErrorCode.ATTEMPT_LIMIT_REACHED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_SUBMITTED: status.HTTP_409_CONFLICT,
    ErrorCode.OUT_OF_RANGE: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VALIDATION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class LearningError(Exception):
    """Base class for domain failures with a user-facing message."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        field_errors: dict[str, list[str]] | None = None,
    ):
        self.message = message
        self.code = code
        self.field_errors = field_errors
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_CODE.get(self.code, status.HTTP_400_BAD_REQUEST)


class UnauthenticatedError(LearningError):
    def __init__(self, message: str = "Silakan login terlebih dahulu"):
        super().__init__(message, ErrorCode.UNAUTHENTICATED)


class AccessDeniedError(LearningError):
    def __init__(self, message: str = "Akses ditolak"):
        super().__init__(message, ErrorCode.ACCESS_DENIED)


class NotEnrolledError(LearningError):
    def __init__(self, message: str = "Belum terdaftar di kursus ini"):
        super().__init__(message, ErrorCode.NOT_ENROLLED)


class AlreadyEnrolledError(LearningError):
    def __init__(self, message: str = "Sudah terdaftar"):
        super().__init__(message, ErrorCode.ALREADY_ENROLLED)


class AttemptLimitReachedError(LearningError):
    """Raised when a learner has used up every attempt of a quiz."""

    def __init__(self, max_attempts: int):
        self.max_attempts = max_attempts
        super().__init__(
            f"Batas percobaan ({max_attempts}x) sudah tercapai",
            ErrorCode.ATTEMPT_LIMIT_REACHED,
        )


class AlreadySubmittedError(LearningError):
    def __init__(self, message: str = "Quiz sudah disubmit"):
        super().__init__(message, ErrorCode.ALREADY_SUBMITTED)


class OutOfRangeError(LearningError):
    """Raised when a grade falls outside ``[minimum, maximum]``."""

    def __init__(self, maximum: int, minimum: int = 0):
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Skor harus antara {minimum} dan {maximum}",
            ErrorCode.OUT_OF_RANGE,
            field_errors={"score": [f"Skor harus antara {minimum} dan {maximum}"]},
        )


class NotFoundError(LearningError):
    def __init__(self, message: str = "Data tidak ditemukan"):
        super().__init__(message, ErrorCode.NOT_FOUND)


class ValidationFailedError(LearningError):
    def __init__(
        self,
        message: str = "Data tidak valid",
        field_errors: dict[str, list[str]] | None = None,
    ):
        super().__init__(message, ErrorCode.VALIDATION_FAILED, field_errors)
