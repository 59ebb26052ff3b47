"""
Domain Entities - Immutable value objects reconstructed per call.
"""

from .activity import (
    ActivityTemplate, EffortHours, Phase, TimelineEvent,
    INFO_ASSURER, SECURITY_ARCHITECT, SOC, TIMELINE_ROLES,
)
from .allocation import (
    AllocationRecord, ProjectMembership, AbsenceInterval, AllocationHistoryEntry,
)
from .segment import (
    Segment, SegmentKind, MatchMode, ConcurrencyBlock, GroupingTables,
    DeliverableAssignment,
)
from .cross_charge import (
    UserProfile, DayRateTable, UserChargeBreakdown, CrossChargingResult,
)

__all__ = [
    'ActivityTemplate', 'EffortHours', 'Phase', 'TimelineEvent',
    'INFO_ASSURER', 'SECURITY_ARCHITECT', 'SOC', 'TIMELINE_ROLES',
    'AllocationRecord', 'ProjectMembership', 'AbsenceInterval', 'AllocationHistoryEntry',
    'Segment', 'SegmentKind', 'MatchMode', 'ConcurrencyBlock', 'GroupingTables',
    'DeliverableAssignment',
    'UserProfile', 'DayRateTable', 'UserChargeBreakdown', 'CrossChargingResult',
]
