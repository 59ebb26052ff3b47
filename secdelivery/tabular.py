"""
Tabular views of engine results for display and CSV export.
"""
from typing import List, Optional, Sequence

import pandas as pd

from secdelivery.domain.entities import CrossChargingResult, DeliverableAssignment, TimelineEvent
from secdelivery.domain.services import ActivityStatus, CriticalPathSummary, activity_status


def timeline_frame(events: Sequence[TimelineEvent]) -> pd.DataFrame:
    """One row per timeline event, effort flattened into role columns."""
    rows = []
    for event in events:
        effort = event.effort_hours.to_dict() if event.effort_hours else {}
        rows.append({
            'date': event.date,
            'name': event.name,
            'phase': event.phase.value,
            'milestone': event.is_milestone,
            'risk_manager_hours': effort.get('risk_manager'),
            'security_architect_hours': effort.get('security_architect'),
            'soc_hours': effort.get('soc'),
        })
    return pd.DataFrame(rows, columns=[
        'date', 'name', 'phase', 'milestone',
        'risk_manager_hours', 'security_architect_hours', 'soc_hours',
    ])


def segments_frame(
    summary: CriticalPathSummary,
    assignments: Sequence[DeliverableAssignment] = (),
    today=None,
    effort_hours_per_day: float = 8.0,
) -> pd.DataFrame:
    """
    One row per activity with its step number, swimlane and (optionally) status.

    Status is only filled in when today is given.
    """
    by_name = {}
    for assignment in assignments:
        by_name.setdefault(assignment.deliverable_name, assignment)

    rows = []
    for step, segment in enumerate(summary.segments, start=1):
        for lane_number, lane in enumerate(segment.swimlanes, start=1):
            for activity in lane:
                status: Optional[ActivityStatus] = None
                if today is not None:
                    status = activity_status(
                        activity.date, by_name.get(activity.name), today, effort_hours_per_day
                    )
                rows.append({
                    'step': step,
                    'kind': segment.kind.value,
                    'swimlane': lane_number if segment.is_parallel else None,
                    'activity': activity.name,
                    'date': activity.date,
                    'status': status.value if status else None,
                })
    return pd.DataFrame(rows, columns=['step', 'kind', 'swimlane', 'activity', 'date', 'status'])


def cross_charge_frame(results: List[CrossChargingResult]) -> pd.DataFrame:
    """One row per (project, user), in result order."""
    rows = [
        {
            'project_id': result.project_id,
            'project_title': result.project_title,
            **breakdown.to_dict(),
        }
        for result in results
        for breakdown in result.user_breakdown
    ]
    return pd.DataFrame(rows, columns=[
        'project_id', 'project_title', 'user_id', 'user_name',
        'role', 'sfia_grade', 'hours', 'cost',
    ])


def project_totals_frame(results: List[CrossChargingResult]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                'project_id': r.project_id,
                'project_title': r.project_title,
                'total_hours': r.total_hours,
                'total_cost': r.total_cost,
                'people': len(r.user_breakdown),
            }
            for r in results
        ],
        columns=['project_id', 'project_title', 'total_hours', 'total_cost', 'people'],
    )
