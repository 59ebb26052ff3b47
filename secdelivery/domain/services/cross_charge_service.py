"""
Cross-Charge Service - Attributes people's time and cost to projects.

For each weekday in the range and each user in the cohort:
    hours[project][user] += hours_per_day * percentage / 100
unless the user is absent that day. Then:
    cost = (hours / hours_per_day) * day_rate[role][grade]

Public holidays are not excluded from the walk; holiday absences must be
supplied as absence intervals (see absences.holiday_absences).
"""
import logging
from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..entities.allocation import AbsenceInterval, ProjectMembership
from ..entities.cross_charge import (
    CrossChargingResult,
    DayRateTable,
    UserChargeBreakdown,
    UserProfile,
)
from ..exceptions import InvalidDateRangeError, UnknownCohortTypeError
from .allocation_resolver import AllocationResolver
from .calendar import as_date, iter_weekdays

logger = logging.getLogger(__name__)


COHORT_TYPES = ("workstream", "whole_team", "primary_role", "individual", "project")


def round_money(value: float) -> float:
    """Round to 2 dp with ties away from zero (2.625 -> 2.63)."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def select_cohort(
    group_type: str,
    group_value: Optional[str],
    profiles: Iterable[UserProfile],
    memberships: Iterable[ProjectMembership] = (),
) -> List[str]:
    """
    Resolve a cross-charging filter into user ids.

    Args:
        group_type: One of 'workstream', 'whole_team', 'primary_role',
            'individual', 'project'
        group_value: Workstream name, role name, user id or project id
        profiles: All user profiles
        memberships: Project memberships (used by 'project')

    Returns:
        User ids, in profile / membership order
    """
    active = [p for p in profiles if not p.disabled]
    if group_type == "workstream":
        return [p.user_id for p in active if p.workstream == group_value]
    if group_type == "whole_team":
        return [p.user_id for p in active]
    if group_type == "primary_role":
        return [p.user_id for p in active if p.primary_role == group_value]
    if group_type == "individual":
        return [group_value] if group_value else []
    if group_type == "project":
        user_ids = []
        for m in memberships:
            if m.project_id == group_value and m.user_id not in user_ids:
                user_ids.append(m.user_id)
        return user_ids
    raise UnknownCohortTypeError(group_type)


def validate_range(start: date, end: date) -> None:
    """Reject reporting ranges that end before they start."""
    if as_date(end) < as_date(start):
        raise InvalidDateRangeError(start, end)


class CrossChargeAggregator:
    """
    Rolls allocated hours and cost up per project and per user.

    Pure over its inputs: the resolver, day rates and hours-per-week are
    fixed at construction, everything else is passed to aggregate().
    """

    def __init__(
        self,
        resolver: AllocationResolver,
        day_rates: DayRateTable,
        working_hours_per_week: float = 40.0,
    ):
        self.resolver = resolver
        self.day_rates = day_rates
        self.working_hours_per_week = working_hours_per_week

    @property
    def hours_per_day(self) -> float:
        return self.working_hours_per_week / 5

    # =========================================================================
    # Hours
    # =========================================================================

    def accumulate_hours(
        self,
        start: date,
        end: date,
        user_ids: Sequence[str],
        absences: Iterable[AbsenceInterval] = (),
    ) -> Dict[str, Dict[str, float]]:
        """
        Walk the range and accumulate unrounded hours.

        Returns:
            Dict of project_id -> {user_id: hours}; empty when end < start
        """
        absences_by_user: Dict[str, List[AbsenceInterval]] = defaultdict(list)
        for absence in absences:
            absences_by_user[absence.user_id].append(absence)

        hours_per_day = self.hours_per_day
        project_hours: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))

        for user_id in user_ids:
            user_absences = absences_by_user.get(user_id, [])
            for day in iter_weekdays(start, end):
                if any(a.covers(day) for a in user_absences):
                    continue
                for allocation in self.resolver.resolve_allocations(user_id, day):
                    hours = hours_per_day * allocation.percentage / 100
                    project_hours[allocation.project_id][user_id] += hours

        return {pid: dict(users) for pid, users in project_hours.items()}

    # =========================================================================
    # Cost & Rollup
    # =========================================================================

    def cost_for(self, hours: float, profile: Optional[UserProfile], user_id: str) -> float:
        """Cost of hours at the user's day rate; 0.0 (with a warning) when unknown."""
        if profile is None or not profile.primary_role or not profile.sfia_grade:
            logger.warning(
                f"Missing profile data for user {user_id}: "
                f"role={profile.primary_role if profile else None}, "
                f"grade={profile.sfia_grade if profile else None}"
            )
            return 0.0

        day_rate = self.day_rates.rate_for(profile.primary_role, profile.sfia_grade)
        if day_rate == 0:
            logger.warning(
                f"No day rate found for {profile.display_name}: "
                f"role={profile.primary_role}, grade={profile.sfia_grade}"
            )
        return (hours / self.hours_per_day) * day_rate

    def aggregate(
        self,
        start: date,
        end: date,
        user_ids: Sequence[str],
        absences: Iterable[AbsenceInterval] = (),
        profiles: Optional[Mapping[str, UserProfile]] = None,
        project_titles: Optional[Mapping[str, str]] = None,
    ) -> List[CrossChargingResult]:
        """
        Cross-charging results for a cohort over [start, end].

        Args:
            start: First day of the range
            end: Last day of the range (inclusive)
            user_ids: Cohort
            absences: Absence intervals for the cohort
            profiles: user_id -> UserProfile, for names and day rates
            project_titles: project_id -> title; when given, projects
                without a title are dropped

        Returns:
            One result per project, highest total_hours first
        """
        if not user_ids:
            return []

        profiles = profiles or {}
        project_hours = self.accumulate_hours(start, end, user_ids, absences)

        results = []
        for project_id, user_hours in project_hours.items():
            if project_titles is not None and project_id not in project_titles:
                logger.warning(f"Project {project_id} has no title, leaving it out of cross-charging")
                continue
            title = project_titles[project_id] if project_titles is not None else project_id

            breakdown = []
            for user_id, hours in user_hours.items():
                profile = profiles.get(user_id)
                cost = self.cost_for(hours, profile, user_id)
                breakdown.append(UserChargeBreakdown(
                    user_id=user_id,
                    user_name=profile.display_name if profile else "Unknown",
                    role=(profile.primary_role if profile else None) or "unknown",
                    sfia_grade=(profile.sfia_grade if profile else None) or 0,
                    hours=round_money(hours),
                    cost=round_money(cost),
                ))

            breakdown.sort(key=lambda ub: ub.hours, reverse=True)
            results.append(CrossChargingResult(
                project_id=project_id,
                project_title=title,
                total_hours=round_money(sum(ub.hours for ub in breakdown)),
                total_cost=round_money(sum(ub.cost for ub in breakdown)),
                user_breakdown=breakdown,
            ))

        results.sort(key=lambda r: r.total_hours, reverse=True)
        logger.info(
            f"Cross-charged {len(user_ids)} user(s) across {len(results)} project(s) "
            f"for {as_date(start).isoformat()} to {as_date(end).isoformat()}"
        )
        return results
