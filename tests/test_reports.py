from datetime import datetime

import pytest

from byajbook.models import InterestMethod, Loan
from byajbook.reports import borrower_summaries, due_reminders, interest_earnings, portfolio_summary


def make_loan(loan_id, name, amount, rate, method, created, due, paid=0.0, active=True):
    return Loan(id=loan_id, borrower_name=name, amount=amount, interest_rate=rate,
                interest_method=method, years=1, date_created=created, due_date=due,
                total_paid=paid, is_active=active)


@pytest.fixture
def loans():
    return [
        make_loan("l1", "Priya", 200000, 12, InterestMethod.SANKDA,
                  datetime(2024, 1, 1), datetime(2025, 1, 1)),
        make_loan("l2", "Raj", 50000, 2, InterestMethod.MONTHLY,
                  datetime(2024, 1, 1), datetime(2025, 1, 1), paid=62000, active=False),
    ]


def test_portfolio_summary(loans):
    summary = portfolio_summary(loans)
    assert summary == {
        "total_lent": 250000,
        "total_payable": 286000,
        "total_received": 62000,
        "total_outstanding": 224000,
        "active_loans": 1,
        "completed_loans": 1,
    }


def test_portfolio_summary_empty():
    assert portfolio_summary([])["total_lent"] == 0


def test_interest_earnings(loans):
    earnings = interest_earnings(loans, now=datetime(2024, 3, 1))
    # 60 days -> 2 months; Priya accrues 2000/month, Raj 1000/month paid 1.24x
    assert earnings["potential"] == pytest.approx(6000)
    assert earnings["earned"] == pytest.approx(2480)


def test_due_reminders(loans):
    loans.append(make_loan("l3", "Amit", 10000, 12, InterestMethod.YEARLY,
                           datetime(2023, 1, 1), datetime(2024, 1, 1)))
    loans.append(make_loan("l4", "Sunita", 10000, 12, InterestMethod.YEARLY,
                           datetime(2024, 6, 1), datetime(2025, 6, 1)))

    reminders = due_reminders(loans, now=datetime(2024, 12, 28, 18, 30))

    assert [r["loan_id"] for r in reminders] == ["l3", "l1"]
    assert reminders[0]["is_overdue"]
    assert reminders[1]["days_until_due"] == 4
    assert reminders[1]["amount"] == pytest.approx(224000)


def test_borrower_summaries(loans):
    loans.append(make_loan("l3", "Priya", 10000, 12, InterestMethod.YEARLY,
                           datetime(2024, 2, 1), datetime(2025, 2, 1)))
    summaries = borrower_summaries(loans)

    assert [s["borrower_name"] for s in summaries] == ["Priya", "Raj"]
    assert summaries[0]["total_lent"] == 210000
    assert summaries[0]["active_loans"] == 2
    assert summaries[1]["completed_loans"] == 1
