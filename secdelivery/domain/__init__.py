"""
Domain Layer - Scheduling and resource-allocation engine.

This module contains:
- entities/: Immutable value objects (ActivityTemplate, TimelineEvent, AllocationRecord, ...)
- services/: Calendar, timeline, critical path, allocation and cross-charging services
"""

from .entities import (
    ActivityTemplate, EffortHours, Phase, TimelineEvent,
    AllocationRecord, ProjectMembership, AbsenceInterval,
    Segment, SegmentKind, GroupingTables, ConcurrencyBlock, MatchMode, DeliverableAssignment,
    UserProfile, DayRateTable, CrossChargingResult, UserChargeBreakdown,
)

__all__ = [
    'ActivityTemplate', 'EffortHours', 'Phase', 'TimelineEvent',
    'AllocationRecord', 'ProjectMembership', 'AbsenceInterval',
    'Segment', 'SegmentKind', 'GroupingTables', 'ConcurrencyBlock', 'MatchMode',
    'DeliverableAssignment',
    'UserProfile', 'DayRateTable', 'CrossChargingResult', 'UserChargeBreakdown',
]
