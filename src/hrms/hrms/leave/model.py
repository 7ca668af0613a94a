from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class NewLeaveRequest:
    employee_id: int
    leave_type_id: int
    start_date: date
    end_date: date
    reason: Optional[str]
