"""
Timeline Builder - Walks the activity catalog into a dated delivery timeline.

Each work activity advances the cursor by the longest allocation-adjusted
role duration (in working days). Allocation stretches elapsed calendar time
only; reported effort always comes from the unadjusted template days.
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..entities.activity import (
    ActivityTemplate,
    EffortHours,
    Phase,
    TimelineEvent,
    INFO_ASSURER,
    SECURITY_ARCHITECT,
    SOC,
    TIMELINE_ROLES,
)
from ..entities.allocation import AllocationRecord, ProjectMembership
from .calendar import add_working_days, as_date, normalize_holidays

logger = logging.getLogger(__name__)


PROJECT_START = "Project Start"
END_SECURITY_DISCOVERY = "End Security Discovery"
END_SECURITY_ALPHA = "End Security Alpha"
GO_LIVE = "Go Live"

# Catalog positions beyond this index are scheduled in the Alpha phase
DISCOVERY_LAST_INDEX = 16

DEFAULT_ALLOCATION = 100.0

DEFAULT_ROLE_MAPPING = {
    "risk_manager": INFO_ASSURER,
    "security_architect": SECURITY_ARCHITECT,
    "sec_mon": SOC,
    "sec_eng": SOC,
}


@dataclass
class Timeline:
    """Ordered timeline events for one project."""

    events: List[TimelineEvent] = field(default_factory=list)

    @property
    def milestones(self) -> List[TimelineEvent]:
        return [e for e in self.events if e.is_milestone]

    @property
    def activities(self) -> List[TimelineEvent]:
        """Non-milestone work events carrying effort."""
        return [e for e in self.events if not e.is_milestone and e.effort_hours]

    @property
    def end_date(self) -> Optional[date]:
        for event in reversed(self.events):
            if event.name == END_SECURITY_ALPHA:
                return event.date
        return None

    def __len__(self) -> int:
        return len(self.events)

    def to_dict(self) -> dict:
        return {
            'events': [e.to_dict() for e in self.events],
            'milestones': [e.to_dict() for e in self.milestones],
        }


def derive_role_allocations(
    project_id: str,
    memberships: Iterable[ProjectMembership],
    current_allocations: Iterable[AllocationRecord],
    role_mapping: Optional[Mapping[str, str]] = None,
) -> Dict[str, float]:
    """
    Map a project's members onto timeline-role allocation percentages.

    A member with no allocation row (or a 0% row) counts as 100%. Project
    roles with no timeline counterpart are ignored; when several members map
    to the same timeline role the last one wins.

    Args:
        project_id: Project whose team is being scheduled
        memberships: Project memberships (any project; filtered here)
        current_allocations: Live allocation rows
        role_mapping: Project role -> timeline role

    Returns:
        Dict of timeline role -> percentage
    """
    mapping = role_mapping or DEFAULT_ROLE_MAPPING
    by_user = {
        a.user_id: a.percentage
        for a in current_allocations
        if a.project_id == project_id
    }

    role_allocations: Dict[str, float] = {}
    for member in memberships:
        if member.project_id != project_id:
            continue
        timeline_role = mapping.get(member.role)
        if not timeline_role:
            continue
        role_allocations[timeline_role] = by_user.get(member.user_id) or DEFAULT_ALLOCATION
    return role_allocations


class TimelineBuilder:
    """
    Builds delivery timelines from an ordered activity catalog.

    The builder holds only its immutable inputs; build() is deterministic
    and may be called any number of times.
    """

    def __init__(
        self,
        activities: Sequence[ActivityTemplate],
        holidays: Optional[Iterable] = None,
        effort_hours_per_day: float = 8.0,
    ):
        self.activities = tuple(activities)
        self.holidays = normalize_holidays(holidays)
        self.effort_hours_per_day = effort_hours_per_day

    @staticmethod
    def _allocation_factor(role_allocations: Mapping[str, float], role: str) -> float:
        """Fraction of time a role spends on the project; 0 or missing means full time."""
        percentage = role_allocations.get(role) or DEFAULT_ALLOCATION
        return percentage / 100

    def elapsed_days(self, activity: ActivityTemplate, role_allocations: Mapping[str, float]) -> int:
        """Working days an activity occupies once allocations are applied."""
        adjusted = [
            days / self._allocation_factor(role_allocations, role)
            for role, days in activity.days_by_role().items()
        ]
        return math.ceil(max(adjusted))

    def effort_for(self, activity: ActivityTemplate) -> EffortHours:
        hours = self.effort_hours_per_day
        return EffortHours(
            risk_manager=activity.info_assurer_days * hours,
            security_architect=activity.security_architect_days * hours,
            soc=activity.soc_analyst_days * hours,
        )

    def build(
        self,
        project_start: Optional[date],
        go_live: Optional[date] = None,
        role_allocations: Optional[Mapping[str, float]] = None,
    ) -> Timeline:
        """
        Walk the catalog from project_start.

        Args:
            project_start: First day of the project; None yields an empty timeline
            go_live: Planned go-live, emitted as-is without reconciliation
            role_allocations: Timeline role -> allocation percentage

        Returns:
            Timeline of milestones and work events in catalog order
        """
        if project_start is None or not self.activities:
            return Timeline()

        allocations = {
            role: pct for role, pct in (role_allocations or {}).items()
            if role in TIMELINE_ROLES
        }
        cursor = as_date(project_start)
        events = [TimelineEvent(PROJECT_START, cursor, True, Phase.DISCOVERY)]

        for index, activity in enumerate(self.activities):
            if activity.is_milestone:
                phase = Phase.DISCOVERY if activity.name == END_SECURITY_DISCOVERY else Phase.ALPHA
                events.append(TimelineEvent(activity.name, cursor, True, phase))
                continue

            max_days = self.elapsed_days(activity, allocations)
            if max_days <= 0:
                continue

            cursor = add_working_days(cursor, max_days, self.holidays)
            phase = Phase.ALPHA if index > DISCOVERY_LAST_INDEX else Phase.DISCOVERY
            events.append(TimelineEvent(
                activity.name, cursor, False, phase, effort_hours=self.effort_for(activity)
            ))

        events.append(TimelineEvent(END_SECURITY_ALPHA, cursor, True, Phase.ALPHA))

        if go_live is not None:
            go_live = as_date(go_live)
            if go_live < cursor:
                logger.info(
                    f"Go-live {go_live.isoformat()} falls before the scheduled "
                    f"end of Alpha {cursor.isoformat()}"
                )
            events.append(TimelineEvent(GO_LIVE, go_live, True, Phase.GO_LIVE))

        return Timeline(events)
