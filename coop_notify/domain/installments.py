"""Installment schedule derivation for member loans"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import List
from coop_notify.domain.models import Loan
from coop_notify.utils.date_utils import add_months, months_between, with_day_rollover


def loan_term_months(loan: Loan) -> int:
    """
    Months between the loan's creation month and its due month.

    Day-of-month is ignored: created 2024-01-31, due 2024-02-01 is one month.
    A result <= 0 means a short-term (single payment) loan.
    """
    return months_between(loan.created_at.date(), loan.due_date)


def generate_installment_schedule(loan: Loan) -> List[date]:
    """
    Generate the monthly installment dates for a loan.

    Requirements:
    - One installment per month of term, anchored on the creation day-of-month
    - Short-term loans (term <= 0) collapse to a single installment on the due date
    - An anchor day missing from the target month rolls into the next month

    Example:
        created 2024-01-15, due 2024-04-15
        → [2024-02-15, 2024-03-15, 2024-04-15]
    """
    start = loan.created_at.date()
    term = loan_term_months(loan)

    if term <= 0:
        return [loan.due_date]

    anchor_day = start.day
    return [with_day_rollover(add_months(start, i), anchor_day) for i in range(1, term + 1)]


def installment_amount(loan: Loan) -> int:
    """
    Per-installment amount: total payment over the term, rounded half up.

    Uses the same short-term collapse as the schedule so amount and
    installment count always agree.
    """
    term = max(loan_term_months(loan), 1)
    amount = Decimal(str(loan.total_payment)) / Decimal(term)
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))
