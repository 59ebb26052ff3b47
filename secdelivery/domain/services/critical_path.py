"""
Critical Path Decomposer - Splits timeline activities into sequential steps
and parallel swimlane blocks, then totals per-role effort two ways.

Aggregation rules:
- Total effort: Σ(effort | activity required)
- Critical path effort: Σ over segments of
    max(swimlane effort) for parallel blocks, Σ(effort) for sequential steps
- Elapsed days: ceil(max role total effort / hours per day)
"""
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..entities.activity import EffortHours, TimelineEvent
from ..entities.segment import (
    ConcurrencyBlock,
    DeliverableAssignment,
    GroupingTables,
    MatchMode,
    Segment,
)
from ..exceptions import DuplicateSwimlaneActivityError, InvariantViolationError

logger = logging.getLogger(__name__)


# (anchor, follower): follower is moved to sit directly after anchor
REORDER_RULES = (
    ("security ownership", "threat assessment"),
    ("intellectual property assessments", "data sharing agreements"),
)


@dataclass
class CriticalPathSummary:
    """
    Decomposition of a timeline with its two effort totals.

    Attributes:
        segments: Ordered sequential / parallel segments
        total_effort: Sum of all required activity effort (maximum)
        critical_path_effort: Longest path through the segments (minimum)
        total_days: ceil(largest role total / hours per day)
        completion_date: Date of the last scheduled activity
        activity_count: Number of activities decomposed
    """

    segments: List[Segment] = field(default_factory=list)
    total_effort: EffortHours = field(default_factory=EffortHours)
    critical_path_effort: EffortHours = field(default_factory=EffortHours)
    total_days: int = 0
    completion_date: Optional[date] = None
    activity_count: int = 0

    def to_dict(self) -> dict:
        return {
            'segments': [s.to_dict() for s in self.segments],
            'total_effort': self.total_effort.to_dict(),
            'critical_path_effort': self.critical_path_effort.to_dict(),
            'total_days': self.total_days,
            'completion_date': self.completion_date.isoformat() if self.completion_date else None,
            'activity_count': self.activity_count,
        }


def _first_index(activities: Sequence[TimelineEvent], fragment: str) -> int:
    for index, activity in enumerate(activities):
        if fragment in activity.name.lower():
            return index
    return -1


def reorder_activities(activities: Sequence[TimelineEvent]) -> List[TimelineEvent]:
    """
    Apply the fixed adjacency rules (threat assessment follows security
    ownership; data sharing agreements follow IP assessments).

    The follower is moved wherever it sits, before or after its anchor.
    """
    ordered = list(activities)
    for anchor, follower in REORDER_RULES:
        anchor_index = _first_index(ordered, anchor)
        follower_index = _first_index(ordered, follower)
        if anchor_index == -1 or follower_index == -1:
            continue
        if follower_index == anchor_index + 1:
            continue
        moved = ordered.pop(follower_index)
        anchor_index = _first_index(ordered, anchor)
        ordered.insert(anchor_index + 1, moved)
    return ordered


class CriticalPathDecomposer:
    """
    Decomposes non-milestone timeline events into critical path segments.

    The grouping tables are injected configuration. Block matching follows
    each block's MatchMode: exact names for the first block and
    case-insensitive substrings for the rest in the shipped configuration.
    """

    def __init__(self, grouping: GroupingTables, effort_hours_per_day: float = 8.0):
        self.grouping = grouping
        self.effort_hours_per_day = effort_hours_per_day

    # =========================================================================
    # Decomposition
    # =========================================================================

    @staticmethod
    def _member_indices(
        activities: Sequence[TimelineEvent],
        names: Iterable[str],
        match: MatchMode,
    ) -> Set[int]:
        """Indices of every activity matched by any of the names."""
        names = list(names)
        return {
            index for index, activity in enumerate(activities)
            if any(match.matches(name, activity.name) for name in names)
        }

    @staticmethod
    def _claim(claimed: Set[int], index: int, activity: TimelineEvent) -> None:
        if index in claimed:
            raise DuplicateSwimlaneActivityError(activity.name, index)
        claimed.add(index)

    def _resolve_swimlanes(
        self,
        activities: Sequence[TimelineEvent],
        block: ConcurrencyBlock,
        claimed: Set[int],
    ) -> List[List[TimelineEvent]]:
        """One swimlane per group; each member name resolves to its first match."""
        swimlanes = []
        for group in block.groups:
            swimlane = []
            for name in group:
                index = next(
                    (i for i, a in enumerate(activities) if block.match.matches(name, a.name)),
                    None,
                )
                if index is None:
                    logger.warning(f"Critical path group member '{name}' matched no activity")
                    continue
                self._claim(claimed, index, activities[index])
                swimlane.append(activities[index])
            if swimlane:
                swimlanes.append(swimlane)
        return swimlanes

    def decompose(self, activities: Sequence[TimelineEvent]) -> List[Segment]:
        """
        Partition activities into ordered segments.

        Order: before block 1, block 1, between 1 and 2, ..., last block,
        sequential groups, then everything left over.

        Args:
            activities: Non-milestone timeline events

        Returns:
            Segments whose flattened activities reproduce the input exactly once
        """
        activities = reorder_activities(activities)
        blocks = self.grouping.concurrent_blocks

        block_members = [
            self._member_indices(activities, (n for g in b.groups for n in g), b.match)
            for b in blocks
        ]
        sequential_members: Set[int] = set()
        for group in self.grouping.sequential_groups:
            sequential_members |= self._member_indices(activities, group, MatchMode.SUBSTRING)

        claimed: Set[int] = set()
        block_lanes = [self._resolve_swimlanes(activities, b, claimed) for b in blocks]

        # Standalone steps fenced by each block's first and last member index
        fenced: List[List[Segment]] = []
        for position in range(len(blocks)):
            lower = max(block_members[position - 1], default=-math.inf) if position else -math.inf
            upper = min(block_members[position], default=math.inf)
            later_members = set().union(*block_members[position:])
            steps = []
            for index, activity in enumerate(activities):
                if index in claimed or index in sequential_members or index in later_members:
                    continue
                if lower < index < upper:
                    claimed.add(index)
                    steps.append(Segment.sequential([activity]))
            fenced.append(steps)

        sequential_steps = []
        for group in self.grouping.sequential_groups:
            indices = sorted(self._member_indices(activities, group, MatchMode.SUBSTRING))
            if not indices:
                continue
            for index in indices:
                self._claim(claimed, index, activities[index])
            sequential_steps.append(Segment.sequential([activities[i] for i in indices]))

        after = [
            Segment.sequential([activity])
            for index, activity in enumerate(activities)
            if index not in claimed
        ]

        segments: List[Segment] = []
        for steps, lanes in zip(fenced, block_lanes):
            segments.extend(steps)
            if lanes:
                segments.append(Segment.parallel(lanes))
        segments.extend(sequential_steps)
        segments.extend(after)

        flattened = sum(len(s.activities) for s in segments)
        if flattened != len(activities):
            raise InvariantViolationError(
                "segments_cover_activities_once",
                expected=f"{len(activities)} activities",
                actual=f"{flattened} activities across segments",
            )
        return segments

    # =========================================================================
    # Effort Aggregation
    # =========================================================================

    @staticmethod
    def _required_lookup(assignments: Iterable[DeliverableAssignment]) -> Dict[str, bool]:
        lookup = {}
        for assignment in assignments:
            lookup.setdefault(assignment.deliverable_name, assignment.required)
        return lookup

    @staticmethod
    def _sum_effort(activities: Iterable[TimelineEvent], required: Dict[str, bool]) -> EffortHours:
        total = EffortHours()
        for activity in activities:
            if activity.effort_hours and required.get(activity.name, True):
                total = total + activity.effort_hours
        return total

    def critical_path_effort(
        self,
        segments: Sequence[Segment],
        assignments: Iterable[DeliverableAssignment] = (),
    ) -> EffortHours:
        """Longest path effort: max swimlane per parallel block, full sum otherwise."""
        required = self._required_lookup(assignments)
        effort = EffortHours()
        for segment in segments:
            if segment.is_parallel:
                longest = EffortHours()
                for lane in segment.swimlanes:
                    longest = longest.elementwise_max(self._sum_effort(lane, required))
                effort = effort + longest
            else:
                effort = effort + self._sum_effort(segment.activities, required)
        return effort

    def total_effort(
        self,
        activities: Iterable[TimelineEvent],
        assignments: Iterable[DeliverableAssignment] = (),
    ) -> EffortHours:
        return self._sum_effort(activities, self._required_lookup(assignments))

    def days_for(self, effort: EffortHours) -> int:
        return math.ceil(effort.largest() / self.effort_hours_per_day)

    def summarize(
        self,
        activities: Sequence[TimelineEvent],
        assignments: Iterable[DeliverableAssignment] = (),
    ) -> CriticalPathSummary:
        """
        Decompose activities and compute both effort totals.

        Args:
            activities: Non-milestone timeline events carrying effort
            assignments: Deliverable assignments; an activity is required
                unless its assignment says otherwise

        Returns:
            CriticalPathSummary
        """
        activities = [a for a in activities if not a.is_milestone and a.effort_hours]
        if not activities:
            return CriticalPathSummary()

        assignments = list(assignments)
        segments = self.decompose(activities)
        total = self.total_effort(activities, assignments)
        critical = self.critical_path_effort(segments, assignments)

        return CriticalPathSummary(
            segments=segments,
            total_effort=total,
            critical_path_effort=critical,
            total_days=self.days_for(total),
            completion_date=activities[-1].date,
            activity_count=len(activities),
        )
