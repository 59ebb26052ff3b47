"""
Absences - Public holiday expansion into per-user absence intervals.
"""
import logging
from datetime import date, timedelta
from typing import Iterable, List, Mapping

from ..entities.allocation import AbsenceInterval
from .calendar import as_date

logger = logging.getLogger(__name__)

PUBLIC_HOLIDAY = "public_holiday"


def holiday_absences(
    holidays: Iterable[Mapping],
    user_ids: Iterable[str],
    today: date,
    existing: Iterable[AbsenceInterval] = (),
    horizon_days: int = 365,
) -> List[AbsenceInterval]:
    """
    Single-day public holiday absences for every user.

    Only holidays between today and today + horizon_days are expanded, and
    a user who already has a public holiday absence starting that day is
    skipped.

    Args:
        holidays: Entries with an ISO 'date' (and optional 'name'); undated
            entries are skipped
        user_ids: Active users
        today: Reference day
        existing: Absences already on record
        horizon_days: How far ahead to look

    Returns:
        New absence intervals for the caller to persist
    """
    today = as_date(today)
    horizon = today + timedelta(days=horizon_days)
    dated = [date.fromisoformat(str(h["date"])) for h in holidays if h.get("date")]
    upcoming = sorted({day for day in dated if today <= day <= horizon})
    already = {
        (a.user_id, a.start_date)
        for a in existing
        if a.absence_type == PUBLIC_HOLIDAY
    }

    created, skipped = [], 0
    user_ids = list(user_ids)
    for holiday in upcoming:
        for user_id in user_ids:
            if (user_id, holiday) in already:
                skipped += 1
                continue
            created.append(AbsenceInterval(user_id, holiday, holiday, PUBLIC_HOLIDAY))

    logger.info(
        f"Holiday sync: {len(upcoming)} upcoming holiday(s), "
        f"{len(created)} absence(s) created, {skipped} skipped"
    )
    return created
