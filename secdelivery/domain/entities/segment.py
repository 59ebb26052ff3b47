"""
Critical Path Entities - Segments, concurrency blocks and deliverable assignments.

A segment is either a run of sequential activities or a parallel block of
swimlanes. Grouping tables describe how activity names are gathered into
the four concurrency blocks.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple

from .activity import TimelineEvent


class SegmentKind(Enum):
    """How the activities in a segment execute."""
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"


class MatchMode(Enum):
    """How a group member name is matched against activity names."""
    EXACT = "exact"
    SUBSTRING = "substring"  # case-insensitive

    def matches(self, member_name: str, activity_name: str) -> bool:
        if self is MatchMode.EXACT:
            return activity_name == member_name
        return member_name.lower() in activity_name.lower()


@dataclass(frozen=True)
class Segment:
    """
    One step of the critical path.

    Sequential segments hold a single swimlane whose activities run one
    after another; parallel segments hold one swimlane per concurrent group.
    """

    kind: SegmentKind
    swimlanes: Tuple[Tuple[TimelineEvent, ...], ...]

    @classmethod
    def sequential(cls, activities: List[TimelineEvent]) -> "Segment":
        return cls(SegmentKind.SEQUENTIAL, (tuple(activities),))

    @classmethod
    def parallel(cls, swimlanes: List[List[TimelineEvent]]) -> "Segment":
        return cls(SegmentKind.PARALLEL, tuple(tuple(lane) for lane in swimlanes))

    @property
    def is_parallel(self) -> bool:
        return self.kind is SegmentKind.PARALLEL

    @property
    def activities(self) -> List[TimelineEvent]:
        """All activities in the segment, swimlanes flattened in order."""
        return [activity for lane in self.swimlanes for activity in lane]

    def to_dict(self) -> dict:
        return {
            'kind': self.kind.value,
            'swimlanes': [[a.to_dict() for a in lane] for lane in self.swimlanes],
        }


@dataclass(frozen=True)
class ConcurrencyBlock:
    """
    A block of groups that run in parallel with one another.

    Each group becomes one swimlane; its member names are resolved to at
    most one activity each, first match wins.
    """

    groups: Tuple[Tuple[str, ...], ...]
    match: MatchMode = MatchMode.SUBSTRING

    @classmethod
    def from_dict(cls, data: dict) -> "ConcurrencyBlock":
        return cls(
            groups=tuple(tuple(str(name) for name in group) for group in data.get("groups", [])),
            match=MatchMode(data.get("match", MatchMode.SUBSTRING.value)),
        )


@dataclass(frozen=True)
class GroupingTables:
    """
    Immutable grouping configuration for the critical path decomposer.

    Attributes:
        concurrent_blocks: Four ordered concurrency blocks
        sequential_groups: Groups of activities shown together but run in series
    """

    concurrent_blocks: Tuple[ConcurrencyBlock, ...]
    sequential_groups: Tuple[Tuple[str, ...], ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DeliverableAssignment:
    """
    A project's record for one deliverable (activity).

    Only `required` affects effort totals; the remaining fields feed the
    activity status and timeline risk checks.
    """

    deliverable_name: str
    required: bool = True
    is_completed: bool = False
    effort_hours: float = 0.0
    due_date: Optional[date] = None
    owner_role: str = ""
