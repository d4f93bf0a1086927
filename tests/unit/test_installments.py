"""Unit tests for installment schedule generation"""

import pytest
from datetime import date, datetime, timezone
from coop_notify.domain.installments import generate_installment_schedule, installment_amount, loan_term_months
from coop_notify.domain.models import Loan


def make_loan(created: date, due: date, total_payment: int = 3000000) -> Loan:
    return Loan(
        id="loan-1",
        owner_id="user-123",
        loan_type="Productive",
        created_at=datetime(created.year, created.month, created.day, 10, 0, tzinfo=timezone.utc),
        due_date=due,
        total_payment=total_payment,
        remaining_payment=total_payment,
        status="active",
    )


def test_generate_schedule_monthly():
    """Test one installment per month anchored on the creation day"""
    loan = make_loan(date(2024, 1, 15), date(2024, 4, 15))

    schedule = generate_installment_schedule(loan)

    assert schedule == [date(2024, 2, 15), date(2024, 3, 15), date(2024, 4, 15)]


def test_generate_schedule_length_matches_term():
    loan = make_loan(date(2023, 6, 10), date(2024, 6, 10))

    schedule = generate_installment_schedule(loan)

    assert loan_term_months(loan) == 12
    assert len(schedule) == 12
    assert all(d.day == 10 for d in schedule)


@pytest.mark.parametrize(
    "created,due",
    [
        (date(2024, 3, 1), date(2024, 3, 25)),  # same month
        (date(2024, 5, 20), date(2024, 4, 30)),  # due before creation
    ],
)
def test_generate_schedule_short_term(created, due):
    """Test term <= 0 collapses to the due date"""
    loan = make_loan(created, due)

    assert generate_installment_schedule(loan) == [due]


def test_generate_schedule_ignores_day_of_month_for_term():
    """Test created on the 31st, due on the 1st of next month is still one month"""
    loan = make_loan(date(2024, 1, 31), date(2024, 2, 1))

    assert loan_term_months(loan) == 1


def test_generate_schedule_day_rollover():
    """Test anchor day missing from a month spills into the next month"""
    loan = make_loan(date(2024, 1, 31), date(2024, 4, 30))

    schedule = generate_installment_schedule(loan)

    # February 2024 has 29 days: the 31st rolls to 2 March
    assert schedule == [date(2024, 3, 2), date(2024, 3, 31), date(2024, 5, 1)]


def test_installment_amount_even_split():
    loan = make_loan(date(2024, 1, 15), date(2024, 4, 15), total_payment=3000000)

    assert installment_amount(loan) == 1000000


def test_installment_amount_rounds_half_up():
    loan = make_loan(date(2024, 1, 15), date(2024, 3, 15), total_payment=1000001)

    # 1000001 / 2 = 500000.5
    assert installment_amount(loan) == 500001


def test_installment_amount_short_term_is_total():
    loan = make_loan(date(2024, 3, 1), date(2024, 3, 25), total_payment=750000)

    assert installment_amount(loan) == 750000
