"""
Domain Services - Scheduling, critical path and cross-charging logic.
"""

from .calendar import (
    is_working_day,
    add_working_days,
    working_days_between,
    normalize_holidays,
)
from .allocation_resolver import AllocationResolver, build_history_entry
from .timeline_builder import Timeline, TimelineBuilder, derive_role_allocations
from .critical_path import CriticalPathDecomposer, CriticalPathSummary, reorder_activities
from .delivery_risk import ActivityStatus, activity_status, has_timeline_risk
from .cross_charge_service import CrossChargeAggregator, select_cohort, validate_range
from .absences import holiday_absences

__all__ = [
    'is_working_day',
    'add_working_days',
    'working_days_between',
    'normalize_holidays',
    'AllocationResolver',
    'build_history_entry',
    'Timeline',
    'TimelineBuilder',
    'derive_role_allocations',
    'CriticalPathDecomposer',
    'CriticalPathSummary',
    'reorder_activities',
    'ActivityStatus',
    'activity_status',
    'has_timeline_risk',
    'CrossChargeAggregator',
    'select_cohort',
    'validate_range',
    'holiday_absences',
]
