from __future__ import annotations

from enum import Enum
from typing import Optional


class AttendanceMark(str, Enum):
    """Daily attendance mark, derived from the normalized punches."""

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    OFF = "OFF"
    NO_SIGN_OUT = "NO_SIGN_OUT"


class EmployeeStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TERMINATED = "TERMINATED"


class AssignmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ENDED = "ENDED"


class RunKind(str, Enum):
    """Main runs cover a whole period, individual runs a single employee."""

    MAIN = "MAIN"
    INDIVIDUAL = "INDIVIDUAL"


class RunStatus(str, Enum):
    """Payroll run lifecycle.

    DRAFT -> PAID / APPROVED / PROCESSED, finalized statuses may move between
    each other, and anything that is not already cancelled may be CANCELLED.
    """

    DRAFT = "DRAFT"
    PAID = "PAID"
    APPROVED = "APPROVED"
    PROCESSED = "PROCESSED"
    CANCELLED = "CANCELLED"

    @property
    def is_finalized(self) -> bool:
        return self in (RunStatus.PAID, RunStatus.APPROVED, RunStatus.PROCESSED)

    def can_transition_to(self, target: "RunStatus") -> bool:
        if self == RunStatus.CANCELLED:
            return False
        if target == RunStatus.CANCELLED:
            return True
        if target == RunStatus.DRAFT:
            return self == RunStatus.DRAFT
        return True

    @classmethod
    def parse(cls, value: object, default: Optional["RunStatus"] = None) -> "RunStatus":
        text = str(value or "").strip().upper()
        if not text and default is not None:
            return default
        return cls(text)


class LeaveStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


class AccountStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
