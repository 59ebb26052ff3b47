"""
Allocation Resolver - Reconstructs a user's allocation set for any day.

Resolution tiers, first non-empty wins:
1. Historical snapshot: the most recent effective_at <= day, taking ALL
   records written at that exact timestamp (one rebalancing event)
2. Current (live) allocation rows for the user
3. Balanced default: 100/k percent across the user's k project memberships
"""
import logging
from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Dict, Iterable, List

from ..entities.allocation import (
    AllocationRecord,
    AllocationHistoryEntry,
    ProjectMembership,
)

logger = logging.getLogger(__name__)


def _as_timestamp(value) -> datetime:
    """Naive datetime for comparisons; dates become midnight, aware values UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


class AllocationResolver:
    """
    Resolves effective allocation percentages from point-in-time history.

    All records are handed in already fetched; the resolver never performs
    I/O and keeps no state beyond per-user indexes of its inputs.
    """

    def __init__(
        self,
        historical_allocations: Iterable[AllocationRecord] = (),
        current_allocations: Iterable[AllocationRecord] = (),
        project_memberships: Iterable[ProjectMembership] = (),
    ):
        self._history: Dict[str, List[AllocationRecord]] = defaultdict(list)
        self._current: Dict[str, List[AllocationRecord]] = defaultdict(list)
        self._memberships: Dict[str, List[ProjectMembership]] = defaultdict(list)

        for record in historical_allocations:
            if record.effective_at is None:
                logger.warning(
                    f"Historical allocation for user {record.user_id} / project "
                    f"{record.project_id} has no timestamp, ignoring"
                )
                continue
            self._history[record.user_id].append(record)
        for record in current_allocations:
            self._current[record.user_id].append(record)
        for membership in project_memberships:
            self._memberships[membership.user_id].append(membership)

    # =========================================================================
    # Resolution
    # =========================================================================

    def historical_snapshot(self, user_id: str, day: date) -> List[AllocationRecord]:
        """
        Records from the user's most recent snapshot effective on or before day.

        Returns:
            Every record sharing the latest qualifying timestamp, or []
        """
        cutoff = _as_timestamp(day)
        eligible = [
            r for r in self._history.get(user_id, [])
            if _as_timestamp(r.effective_at) <= cutoff
        ]
        if not eligible:
            return []
        latest = max(_as_timestamp(r.effective_at) for r in eligible)
        return [r for r in eligible if _as_timestamp(r.effective_at) == latest]

    def balanced_default(self, user_id: str) -> List[AllocationRecord]:
        """Equal split across the user's memberships (100/k each)."""
        memberships = self._memberships.get(user_id, [])
        if not memberships:
            return []
        share = 100 / len(memberships)
        return [
            AllocationRecord(user_id=user_id, project_id=m.project_id, percentage=share)
            for m in memberships
        ]

    def resolve_allocations(self, user_id: str, day: date) -> List[AllocationRecord]:
        """
        The full allocation set in force for a user on a day.

        Args:
            user_id: User identifier
            day: Day being resolved

        Returns:
            Allocation records (percentages need not sum to 100)
        """
        snapshot = self.historical_snapshot(user_id, day)
        if snapshot:
            return snapshot

        current = list(self._current.get(user_id, []))
        if current:
            logger.debug(f"No snapshot for user {user_id} on {day}, using current allocation")
            return current

        balanced = self.balanced_default(user_id)
        if balanced:
            logger.debug(
                f"No allocation for user {user_id} on {day}, "
                f"balancing across {len(balanced)} project(s)"
            )
        return balanced

    def resolve_percentage(self, user_id: str, project_id: str, day: date) -> float:
        """Effective percentage for a user on a project on a day (0 if absent)."""
        for record in self.resolve_allocations(user_id, day):
            if record.project_id == project_id:
                return record.percentage
        return 0.0


def build_history_entry(
    current: AllocationRecord,
    period_start: datetime,
    period_end: datetime,
    effort_hours_per_day: float = 8.0,
) -> AllocationHistoryEntry:
    """
    Snapshot an outgoing allocation before it is replaced.

    hours_worked counts Monday-Friday steps from period_start while still
    before period_end, times the daily hours share of the old percentage.

    Args:
        current: The allocation row about to be overwritten
        period_start: When that allocation took effect
        period_end: When it is being replaced
        effort_hours_per_day: Hours in a full working day

    Returns:
        History entry ready for the caller to persist
    """
    working_days = 0
    cursor = period_start
    while cursor < period_end:
        if cursor.weekday() < 5:
            working_days += 1
        cursor += timedelta(days=1)

    return AllocationHistoryEntry(
        user_id=current.user_id,
        project_id=current.project_id,
        percentage=current.percentage,
        period_start=period_start,
        period_end=period_end,
        hours_worked=working_days * effort_hours_per_day * (current.percentage / 100),
    )
