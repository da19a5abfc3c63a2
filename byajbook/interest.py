"""
Interest calculation for ByajBook loans.

Three rate conventions share one formula:
  - monthly: rate is per month, applied over ``years * 12`` periods
  - yearly:  rate is per year, applied over ``years`` periods
  - sankda:  fixed 12% per year regardless of the stated rate

``final_amount`` itself is period-agnostic; ``engine_input`` produces the
method-appropriate period count for a stored loan or a dialogue draft.
No rounding happens here.
"""

from typing import Any, Dict, Mapping

from .utils.config import SANKDA_RATE


def _field(loan: Any, name: str, default: Any = None) -> Any:
    if isinstance(loan, Mapping):
        return loan.get(name, default)
    return getattr(loan, name, default)


def _method_value(method: Any) -> str:
    return getattr(method, "value", method)


def effective_rate(interest_method, interest_rate: float) -> float:
    """Rate actually charged; sankda ignores the stated rate."""
    if _method_value(interest_method) == "sankda":
        return SANKDA_RATE
    return interest_rate


def period_count(interest_method, years: float) -> float:
    """Number of rate periods in ``years`` for the given method."""
    if _method_value(interest_method) == "monthly":
        return years * 12
    return years


def engine_input(loan: Any) -> Dict[str, Any]:
    """
    Normalise a stored loan or a draft into the engine's input shape.

    Args:
        loan: Mapping or object with amount, interest_rate, interest_method,
            years and optionally interest_type / total_paid.

    Returns:
        Dict whose ``years`` is already the method's period count.
    """
    method = _method_value(_field(loan, "interest_method", "yearly"))
    return {
        "amount": _field(loan, "amount", 0.0),
        "interest_rate": _field(loan, "interest_rate", 0.0) or 0.0,
        "interest_method": method,
        "years": period_count(method, _field(loan, "years", 0.0)),
        "interest_type": _method_value(_field(loan, "interest_type", "simple")) or "simple",
        "total_paid": _field(loan, "total_paid", 0.0) or 0.0,
    }


def final_amount(loan: Any) -> float:
    amount = _field(loan, "amount")
    years = _field(loan, "years")
    rate = effective_rate(_field(loan, "interest_method"), _field(loan, "interest_rate"))

    if _method_value(_field(loan, "interest_type", "simple")) == "compound":
        return amount * (1 + rate / 100) ** years
    return amount + (amount * rate * years) / 100


def interest_amount(loan: Any) -> float:
    return final_amount(loan) - _field(loan, "amount")


def outstanding_amount(loan: Any) -> float:
    return final_amount(loan) - (_field(loan, "total_paid", 0.0) or 0.0)


def payable(loan: Any) -> float:
    """Final amount of a stored loan or draft, normalised by method."""
    return final_amount(engine_input(loan))


def monthly_interest(loan: Any) -> float:
    """Interest accruing per month on a simple-interest loan."""
    rate = effective_rate(_field(loan, "interest_method"), _field(loan, "interest_rate"))
    amount = _field(loan, "amount")
    if _method_value(_field(loan, "interest_method")) == "monthly":
        return amount * rate / 100
    return amount * rate / 100 / 12
