"""Classify installment dates against the reminder lookahead window"""

from datetime import date, timedelta
from typing import Iterable
from coop_notify.domain.models import DueSoon, UpcomingInstallment


def classify_due_soon(
    schedule: Iterable[date],
    current_date: date,
    window_days: int = 3,
) -> DueSoon:
    """
    Split a schedule into today's installment and upcoming ones.

    - today: same calendar day as current_date
    - upcoming: within [current_date, current_date + window_days], not today
    - anything else is ignored

    Each upcoming date is reported separately with its days-until count.
    """
    window_end = current_date + timedelta(days=window_days)
    result = DueSoon()

    for installment_date in schedule:
        if installment_date == current_date:
            result.today = installment_date
        elif current_date < installment_date <= window_end:
            result.upcoming.append(
                UpcomingInstallment(
                    due_date=installment_date,
                    days_until=(installment_date - current_date).days,
                )
            )

    return result
