from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class ConcurrentUpdateError(DomainError):
    """Raised when a record changed between read and conditional write."""


class AttendanceError(DomainError):
    """A rejected attendance transition.

    ``code`` is stable and safe to return to API clients; ``hint`` tells the user
    how to resolve the condition before re-issuing the action.
    """

    code = "ATTENDANCE_ERROR"
    default_message = "Attendance action not allowed"
    hint = ""

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "hint": self.hint}


# Shift state

class AlreadyClockedIn(AttendanceError):
    code = "ALREADY_CLOCKED_IN"
    default_message = "Already clocked in. Please clock out first."


class NotClockedIn(AttendanceError):
    code = "NOT_CLOCKED_IN"
    default_message = "No open shift. Please clock in first."


class ShiftClosed(AttendanceError):
    code = "SHIFT_CLOSED"
    default_message = "You have already clocked out for today."


class RecordNotFound(AttendanceError):
    code = "RECORD_NOT_FOUND"
    default_message = "Attendance record not found"


# Actor eligibility

class StaffNotFound(AttendanceError):
    code = "PROFILE_NOT_FOUND"
    default_message = "Staff profile not found"
    hint = "Contact your administrator."


class MissingOrganizationContext(AttendanceError):
    code = "MISSING_ORG_ID"
    default_message = "Profile not linked to an organization or location."
    hint = "Please contact admin to fix your account."


class OrganizationMismatch(AttendanceError):
    code = "ORG_MISMATCH"
    default_message = "Organization mismatch"
    hint = "Please contact admin to fix your account."


class InactiveStaff(AttendanceError):
    code = "INACTIVE_STAFF"
    default_message = "Your account is not active."
    hint = "Please contact admin."


class LicenseExpired(AttendanceError):
    code = "LICENSE_EXPIRED"
    default_message = "Your professional license has expired."
    hint = "Please update your credentials in your profile."


class LicenseRejected(AttendanceError):
    code = "LICENSE_REJECTED"
    default_message = "Your license verification was rejected."
    hint = "Please contact admin."


class LocationRequired(AttendanceError):
    code = "LOCATION_REQUIRED"
    default_message = "A location is required to clock in."
    hint = "Select your work location and try again."


class NoScheduledShift(AttendanceError):
    code = "NO_SCHEDULED_SHIFT"
    default_message = "You have no scheduled shift today."
    hint = "Ask your manager to schedule you before clocking in."


# Policy and sequencing

class LunchNotEnabled(AttendanceError):
    code = "LUNCH_NOT_ENABLED"
    default_message = "Lunch tracking is not enabled for your organization."


class BreaksNotEnabled(AttendanceError):
    code = "BREAKS_NOT_ENABLED"
    default_message = "Break tracking is not enabled for your organization."


class LunchAlreadyUsed(AttendanceError):
    code = "LUNCH_ALREADY_USED"
    default_message = "Lunch already taken today."


class BreakLimitReached(AttendanceError):
    code = "BREAK_LIMIT_REACHED"
    default_message = "Maximum number of breaks reached for today."


class AlreadyOnLunch(AttendanceError):
    code = "ALREADY_ON_LUNCH"
    default_message = "You are on lunch."
    hint = "End your lunch first."


class AlreadyOnBreak(AttendanceError):
    code = "ALREADY_ON_BREAK"
    default_message = "You are on a break."
    hint = "End your break first."


class NotOnLunch(AttendanceError):
    code = "NOT_ON_LUNCH"
    default_message = "Not currently on lunch"


class NotOnBreak(AttendanceError):
    code = "NOT_ON_BREAK"
    default_message = "Not currently on break"


class InsufficientLeaveBalance(ValidationError):
    """Raised when a leave request asks for more days than the staff member has left."""

    def __init__(self, available: int, requested: int):
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient leave balance. Available: {available} days, Requested: {requested} days. "
            "Admin confirmation required to proceed."
        )
