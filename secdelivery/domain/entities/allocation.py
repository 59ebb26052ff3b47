"""
Allocation Entities - Time allocation snapshots, memberships and absences.

An AllocationRecord with an effective_at timestamp is a historical snapshot
row; one without is a live (current) allocation row.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class AllocationRecord:
    """
    Percentage of a user's time committed to a project.

    Attributes:
        user_id: User identifier
        project_id: Project identifier
        percentage: Allocation percentage (sets need not sum to 100)
        effective_at: Snapshot timestamp; None for the live allocation row
    """

    user_id: str
    project_id: str
    percentage: float
    effective_at: Optional[datetime] = None

    @property
    def is_historical(self) -> bool:
        return self.effective_at is not None

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'project_id': self.project_id,
            'percentage': self.percentage,
            'effective_at': self.effective_at.isoformat() if self.effective_at else None,
        }


@dataclass(frozen=True)
class ProjectMembership:
    """A user's membership of a project team, with their project role."""

    user_id: str
    project_id: str
    role: str = ""


@dataclass(frozen=True)
class AbsenceInterval:
    """
    Inclusive absence window for a user.

    Attributes:
        user_id: User identifier
        start_date: First absent day
        end_date: Last absent day
        absence_type: e.g. 'annual_leave', 'public_holiday'
    """

    user_id: str
    start_date: date
    end_date: date
    absence_type: str = "annual_leave"

    def covers(self, day: date) -> bool:
        """True when day falls inside the interval (bounds included)."""
        return self.start_date <= day <= self.end_date


@dataclass(frozen=True)
class AllocationHistoryEntry:
    """
    Snapshot of an outgoing allocation, written when the allocation changes.

    hours_worked is the allocated share of the weekdays in
    [period_start, period_end).
    """

    user_id: str
    project_id: str
    percentage: float
    period_start: datetime
    period_end: datetime
    hours_worked: float = 0.0
