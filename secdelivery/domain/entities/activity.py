"""
Activity Entities - Delivery activity catalog and dated timeline events.

Implements:
- Immutable activity templates (the canonical delivery sequence)
- Per-role effort in hours for scheduled work
- Timeline events with Discovery / Alpha / Go Live phase tagging
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Dict, Optional

from ..exceptions import InvalidActivityTemplateError


# Timeline roles used for allocation-adjusted scheduling
INFO_ASSURER = "info_assurer"
SECURITY_ARCHITECT = "security_architect"
SOC = "soc"

TIMELINE_ROLES = (INFO_ASSURER, SECURITY_ARCHITECT, SOC)


class Phase(Enum):
    """Delivery phase a timeline event belongs to."""
    DISCOVERY = "Discovery"
    ALPHA = "Alpha"
    GO_LIVE = "Go Live"


@dataclass(frozen=True)
class ActivityTemplate:
    """
    One entry in the externally configured activity catalog.

    Attributes:
        name: Activity name (e.g., 'Threat Assessment')
        is_milestone: Milestones consume no time and carry no effort
        info_assurer_days: Effort days for the information assurer
        security_architect_days: Effort days for the security architect
        soc_analyst_days: Effort days for the SOC analyst
    """

    name: str
    is_milestone: bool = False
    info_assurer_days: float = 0.0
    security_architect_days: float = 0.0
    soc_analyst_days: float = 0.0

    def __post_init__(self):
        """Reject blank names and negative effort."""
        if not self.name or not self.name.strip():
            raise InvalidActivityTemplateError(repr(self.name), "name is blank")
        for role, days in self.days_by_role().items():
            if days < 0:
                raise InvalidActivityTemplateError(
                    self.name, f"{role} days cannot be negative ({days})"
                )

    def days_by_role(self) -> Dict[str, float]:
        """Raw effort days keyed by timeline role."""
        return {
            INFO_ASSURER: self.info_assurer_days,
            SECURITY_ARCHITECT: self.security_architect_days,
            SOC: self.soc_analyst_days,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ActivityTemplate":
        """Build a template from a catalog mapping (YAML / scenario file)."""
        return cls(
            name=str(data.get("name", "")).strip(),
            is_milestone=bool(data.get("is_milestone", False)),
            info_assurer_days=float(data.get("info_assurer_days", 0) or 0),
            security_architect_days=float(data.get("security_architect_days", 0) or 0),
            soc_analyst_days=float(data.get("soc_analyst_days", 0) or 0),
        )


@dataclass(frozen=True)
class EffortHours:
    """Effort in hours for the three delivery roles."""

    risk_manager: float = 0.0
    security_architect: float = 0.0
    soc: float = 0.0

    ROLES = ("risk_manager", "security_architect", "soc")

    def __add__(self, other: "EffortHours") -> "EffortHours":
        return EffortHours(
            risk_manager=self.risk_manager + other.risk_manager,
            security_architect=self.security_architect + other.security_architect,
            soc=self.soc + other.soc,
        )

    def elementwise_max(self, other: "EffortHours") -> "EffortHours":
        return EffortHours(
            risk_manager=max(self.risk_manager, other.risk_manager),
            security_architect=max(self.security_architect, other.security_architect),
            soc=max(self.soc, other.soc),
        )

    def largest(self) -> float:
        return max(self.risk_manager, self.security_architect, self.soc)

    def to_dict(self) -> dict:
        return {
            'risk_manager': self.risk_manager,
            'security_architect': self.security_architect,
            'soc': self.soc,
        }


@dataclass(frozen=True)
class TimelineEvent:
    """
    A dated point on the delivery timeline.

    Work events carry effort hours computed from the unadjusted template
    days; milestones carry none.
    """

    name: str
    date: date
    is_milestone: bool
    phase: Phase
    effort_hours: Optional[EffortHours] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'name': self.name,
            'date': self.date.isoformat(),
            'is_milestone': self.is_milestone,
            'phase': self.phase.value,
            'effort_hours': self.effort_hours.to_dict() if self.effort_hours else None,
        }
