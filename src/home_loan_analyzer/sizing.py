"""Loan sizing strategies: affordable monthly payment → maximum principal.

Each promotion selects one strategy through ``loan_calc_method``:

- accurate:    amortization inverse at the mean rate of the first three tiers
- multiplier:  payment × promotion multiplier
- per_million: payment ÷ (baht of payment per million borrowed) × 1 000 000
"""
from __future__ import annotations

from decimal import Decimal
from typing import Callable

from .calculator import max_loan_from_payment
from .config import ACCURATE_RATE_TIERS, FALLBACK_ANNUAL_RATE, MILLION, ZERO
from .promotions import Promotion

SizingStrategy = Callable[[Decimal, Promotion, int], Decimal]


def intro_rate(promotion: Promotion) -> Decimal:
    """Plain mean of the first three tier rates.

    The fallback rate applies when there are no tiers or the mean is zero.
    """
    head = promotion.rates[:ACCURATE_RATE_TIERS]
    if not head:
        return FALLBACK_ANNUAL_RATE
    mean = sum((tier.rate for tier in head), ZERO) / len(head)
    return mean or FALLBACK_ANNUAL_RATE


def size_accurate(payment: Decimal, promotion: Promotion, years: int) -> Decimal:
    return max_loan_from_payment(payment, intro_rate(promotion), years)


def size_multiplier(payment: Decimal, promotion: Promotion, years: int) -> Decimal:
    return payment * promotion.multiplier


def size_per_million(payment: Decimal, promotion: Promotion, years: int) -> Decimal:
    if promotion.per_million_rate <= ZERO:
        return ZERO
    return payment / promotion.per_million_rate * MILLION


STRATEGIES: dict[str, SizingStrategy] = {
    "accurate": size_accurate,
    "multiplier": size_multiplier,
    "per_million": size_per_million,
}


def max_loan_by_affordability(payment: Decimal, promotion: Promotion, years: int) -> Decimal:
    """Size the loan with the strategy the promotion declares."""
    try:
        strategy = STRATEGIES[promotion.loan_calc_method]
    except KeyError:
        raise ValueError(
            f"Unknown loan_calc_method '{promotion.loan_calc_method}'. "
            f"Valid values: {', '.join(sorted(STRATEGIES))}"
        ) from None
    return strategy(payment, promotion, years)
