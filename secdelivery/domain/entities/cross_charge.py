"""
Cross-Charging Entities - Day rates, user profiles and per-project rollups.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional


@dataclass(frozen=True)
class UserProfile:
    """
    Cross-charging view of a team member.

    Attributes:
        user_id: User identifier
        first_name / last_name: Display name parts
        primary_role: Day-rate role key (e.g., 'security_architect')
        sfia_grade: SFIA grade used as the day-rate grade key
        workstream: Workstream the user belongs to
        disabled: Disabled users are left out of team-wide cohorts
    """

    user_id: str
    first_name: str = ""
    last_name: str = ""
    primary_role: Optional[str] = None
    sfia_grade: Optional[int] = None
    workstream: Optional[str] = None
    disabled: bool = False

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or "Unknown"


class DayRateTable:
    """
    Day rates keyed by role then grade (currency per 8-hour day).

    Grades are looked up by their string form so that YAML keys such as
    '4' and integer profile grades such as 4 resolve to the same rate.
    """

    def __init__(self, rates: Optional[Mapping[str, Mapping]] = None):
        self._rates: Dict[str, Dict[str, float]] = {
            str(role): {str(grade): float(rate) for grade, rate in (grades or {}).items()}
            for role, grades in (rates or {}).items()
        }

    def rate_for(self, role: Optional[str], grade) -> float:
        """Day rate for role/grade, or 0.0 when either is missing."""
        if not role or grade is None:
            return 0.0
        return self._rates.get(role, {}).get(str(grade), 0.0)

    @property
    def roles(self) -> List[str]:
        return list(self._rates)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        return {role: dict(grades) for role, grades in self._rates.items()}


@dataclass
class UserChargeBreakdown:
    """One user's hours and cost against a project."""

    user_id: str
    user_name: str
    role: str
    sfia_grade: int
    hours: float
    cost: float

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'user_name': self.user_name,
            'role': self.role,
            'sfia_grade': self.sfia_grade,
            'hours': self.hours,
            'cost': self.cost,
        }


@dataclass
class CrossChargingResult:
    """
    Cross-charge rollup for one project.

    Attributes:
        project_id: Project identifier
        project_title: Project title
        total_hours: Sum of the rounded user hours
        total_cost: Sum of the rounded user costs
        user_breakdown: Per-user rows, highest hours first
    """

    project_id: str
    project_title: str
    total_hours: float = 0.0
    total_cost: float = 0.0
    user_breakdown: List[UserChargeBreakdown] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'project_id': self.project_id,
            'project_title': self.project_title,
            'total_hours': self.total_hours,
            'total_cost': self.total_cost,
            'user_breakdown': [ub.to_dict() for ub in self.user_breakdown],
        }
