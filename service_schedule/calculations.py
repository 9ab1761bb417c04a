"""Helper functions for due point and status calculations."""

from datetime import date
from dateutil.relativedelta import relativedelta
from typing import Optional

from .status import Status


def last_boundary(miles: float, interval: Optional[float]) -> Optional[int]:
    """Most recent interval boundary at or below the given mileage."""
    if not interval or interval <= 0:
        return None
    return int(miles // interval) * int(interval)


def calc_next_due_miles(miles: float, interval: Optional[float]) -> Optional[int]:
    """
    Calculate next due mileage assuming on-schedule service so far.

    - At zero miles: first service one full interval out
    - Otherwise: the boundary after the most recent one below current mileage
    """
    boundary = last_boundary(miles, interval)
    if boundary is None:
        return None
    if miles == 0:
        return int(interval)
    return boundary + int(interval)


def calc_due_date(start: date, interval_months: Optional[int]) -> Optional[date]:
    """Calculate next due date: start + interval months (clamped to month end)."""
    if not interval_months or interval_months <= 0:
        return None
    return start + relativedelta(months=int(interval_months))


def check_status(current: float, due: float, lead: float) -> Status:
    """Determine status by comparing current value to due threshold."""
    if current >= due:
        return Status.OVERDUE
    if current >= due - lead:
        return Status.UPCOMING
    return Status.OK


def combine_status(
    mileage_status: Optional[Status],
    date_status: Optional[Status],
    is_combined: bool = True,
) -> Status:
    """
    Merge mileage and date sub-statuses into one entry status.

    Combined ("whichever comes first"): the more urgent sub-status wins.
    Non-combined with both sub-statuses: OVERDUE only when both are overdue,
    otherwise UPCOMING when either is inside its lead window (an overdue
    sub-status is), otherwise OK. A single sub-status passes through and
    no sub-status at all is OK.
    """
    if mileage_status is None and date_status is None:
        return Status.OK
    if mileage_status is None:
        return date_status
    if date_status is None:
        return mileage_status

    if is_combined:
        return min(mileage_status, date_status, key=lambda s: s.value)

    if mileage_status == Status.OVERDUE and date_status == Status.OVERDUE:
        return Status.OVERDUE
    if mileage_status != Status.OK or date_status != Status.OK:
        return Status.UPCOMING
    return Status.OK
