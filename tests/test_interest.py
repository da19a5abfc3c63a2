import pytest

from byajbook.interest import (
    effective_rate, engine_input, final_amount, interest_amount,
    monthly_interest, outstanding_amount, payable, period_count,
)
from byajbook.models import InterestMethod


def test_simple_interest_yearly():
    loan = {"amount": 10000, "interest_rate": 12, "interest_method": "yearly",
            "years": 1, "interest_type": "simple"}
    assert final_amount(loan) == 11200


def test_compound_interest_yearly():
    loan = {"amount": 10000, "interest_rate": 12, "interest_method": "yearly",
            "years": 2, "interest_type": "compound"}
    assert final_amount(loan) == pytest.approx(12544)


def test_sankda_ignores_stated_rate():
    loan = {"amount": 10000, "interest_rate": 30, "interest_method": "sankda", "years": 1}
    assert final_amount(loan) == 11200
    assert effective_rate(InterestMethod.SANKDA, 30) == 12


def test_monthly_rate_counts_months():
    loan = {"amount": 10000, "interest_rate": 2, "interest_method": "monthly", "years": 1}
    assert period_count("monthly", 1) == 12
    assert payable(loan) == 12400


def test_engine_input_defaults():
    normalised = engine_input({"amount": 5000, "interest_rate": None,
                               "interest_method": InterestMethod.YEARLY, "years": 2})
    assert normalised["interest_method"] == "yearly"
    assert normalised["interest_rate"] == 0.0
    assert normalised["interest_type"] == "simple"
    assert normalised["total_paid"] == 0.0


def test_interest_and_outstanding():
    loan = {"amount": 10000, "interest_rate": 12, "interest_method": "yearly",
            "years": 1, "total_paid": 200}
    assert interest_amount(loan) == 1200
    assert outstanding_amount(loan) == 11000


def test_monthly_interest_per_method():
    assert monthly_interest({"amount": 12000, "interest_rate": 12, "interest_method": "yearly"}) == 120
    assert monthly_interest({"amount": 10000, "interest_rate": 2, "interest_method": "monthly"}) == 200
    assert monthly_interest({"amount": 12000, "interest_rate": 0, "interest_method": "sankda"}) == 120


def test_works_on_objects(builder):
    from byajbook.models import LoanDraft
    draft = LoanDraft(borrower_name="Priya", amount=200000,
                      interest_method=InterestMethod.SANKDA, years=1)
    assert payable(draft) == 224000
    assert payable(builder.build(draft)) == 224000
