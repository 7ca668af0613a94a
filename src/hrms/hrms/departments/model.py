from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class DepartmentInput:
    name: str
    description: Optional[str]
    budget: Decimal
    manager_assignment_id: Optional[int]


@dataclass(frozen=True)
class PositionInput:
    title: str
    description: Optional[str]
