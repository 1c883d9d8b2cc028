class HRMSError(Exception):
    """Base class for errors the API reports back to the caller."""

    status_code = 500
    retryable = False

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__doc__)
        self.message = message or self.__class__.__doc__

    def to_dict(self):
        return {
            "success": False,
            "message": self.message,
            "error": self.__class__.__name__,
            "retryable": self.retryable,
        }


class ValidationError(HRMSError, ValueError):
    """Invalid input"""
    status_code = 400


class InvalidWageError(ValidationError):
    """Invalid wage amount. Wage must be a positive number."""


class MalformedIdError(ValidationError):
    """Identifier does not match PREFIX + YYYY + NNNN"""


class InvalidAttendanceStatusError(ValidationError):
    """Unknown attendance status"""


class InvalidStatusTransitionError(ValidationError):
    """Payroll status change not allowed"""


class NotFoundError(HRMSError):
    """Record not found"""
    status_code = 404


class EmployeeNotFoundError(NotFoundError):
    """Employee not found"""


class AttendanceNotFoundError(NotFoundError):
    """Attendance record not found"""


class PayrollNotFoundError(NotFoundError):
    """Payroll record not found"""


class ConflictError(HRMSError):
    """A concurrent or repeated write collided with an existing record."""
    status_code = 409
    retryable = True


class IdConflictError(ConflictError):
    """Identifier already issued, retry the request"""


class DuplicatePayrollError(ConflictError):
    """Payroll for this period already exists"""


class AttendanceConflictError(ConflictError):
    """Attendance already recorded for this date"""


class IdSequenceExhaustedError(HRMSError):
    """No sequence numbers left for this year"""
    status_code = 409
