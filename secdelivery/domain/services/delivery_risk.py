"""
Delivery Risk - Deliverable status and go-live timeline risk checks.

At-risk uses working_days_between, which ignores public holidays, while the
schedule itself skips them. The risk check is therefore more lenient than
the schedule it is checking.
"""
import logging
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from ..entities.segment import DeliverableAssignment
from .calendar import as_date, working_days_between

logger = logging.getLogger(__name__)


class ActivityStatus(Enum):
    """Display status of a critical path activity."""
    DEFAULT = "default"
    NOT_REQUIRED = "not-required"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    AT_RISK = "at-risk"


def activity_status(
    activity_date: date,
    assignment: Optional[DeliverableAssignment],
    today: date,
    effort_hours_per_day: float = 8.0,
) -> ActivityStatus:
    """
    Status of an activity against its deliverable assignment.

    Args:
        activity_date: Scheduled date of the activity (its due date)
        assignment: The project's assignment for the deliverable, if any
        today: Reference day
        effort_hours_per_day: Hours available per working day

    Returns:
        ActivityStatus
    """
    if assignment is None:
        return ActivityStatus.DEFAULT
    if not assignment.required:
        return ActivityStatus.NOT_REQUIRED
    if assignment.is_completed:
        return ActivityStatus.COMPLETED

    due, today = as_date(activity_date), as_date(today)
    if due < today:
        return ActivityStatus.OVERDUE

    available_hours = working_days_between(today, due) * effort_hours_per_day
    if assignment.effort_hours > 0 and available_hours < assignment.effort_hours:
        return ActivityStatus.AT_RISK
    return ActivityStatus.DEFAULT


def has_timeline_risk(
    go_live: Optional[date],
    assignments: Iterable[DeliverableAssignment],
) -> bool:
    """
    True when the latest deliverable due date falls after go-live.

    No go-live date, or no dated deliverables, means no risk.
    """
    if go_live is None:
        return False
    due_dates = [as_date(a.due_date) for a in assignments if a.due_date is not None]
    if not due_dates:
        return False
    latest = max(due_dates)
    at_risk = latest > as_date(go_live)
    if at_risk:
        logger.info(f"Last deliverable due {latest.isoformat()} is after go-live {as_date(go_live).isoformat()}")
    return at_risk
