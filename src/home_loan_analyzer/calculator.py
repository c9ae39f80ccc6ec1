"""Core financial calculation functions.

All monetary values use decimal.Decimal; float is forbidden.
Rates are percent per annum; terms are whole years.
Full precision is kept throughout; rounding is a display concern.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from .config import FALLBACK_ANNUAL_RATE, HUNDRED, MONTHS_PER_YEAR, PREVIEW_MONTHS, ZERO
from .promotions import RateTier


def _monthly_rate(annual_rate_pct: Decimal) -> Decimal:
    return annual_rate_pct / HUNDRED / MONTHS_PER_YEAR


@dataclass(frozen=True)
class AmortizationRow:
    month: int
    payment: Decimal
    principal: Decimal
    interest: Decimal
    balance: Decimal    # floored at zero


def monthly_payment(principal: Decimal, annual_rate_pct: Decimal, years: int) -> Decimal:
    """Return the fully amortizing monthly payment.

    Uses the standard reducing-balance formula:
        payment = P * r * (1 + r)^n / ((1 + r)^n - 1)

    Special cases: n <= 0 gives 0, r == 0 gives P / n (straight-line).
    """
    n = int(years) * MONTHS_PER_YEAR
    if n <= 0:
        return ZERO
    r = _monthly_rate(Decimal(annual_rate_pct))
    if r == ZERO:
        return Decimal(principal) / n
    factor = (1 + r) ** n
    return Decimal(principal) * r * factor / (factor - 1)


def max_loan_from_payment(payment: Decimal, annual_rate_pct: Decimal, years: int) -> Decimal:
    """Inverse of monthly_payment: the principal a given payment can carry.

        principal = payment * ((1 + r)^n - 1) / (r * (1 + r)^n)
    """
    n = int(years) * MONTHS_PER_YEAR
    if n <= 0:
        return ZERO
    r = _monthly_rate(Decimal(annual_rate_pct))
    if r == ZERO:
        return Decimal(payment) * n
    factor = (1 + r) ** n
    return Decimal(payment) * (factor - 1) / (r * factor)


def blended_rate(tiers: Sequence[RateTier], years: int) -> Decimal:
    """Weight each tier's rate by the years it is in effect within *years*.

    Tiers are walked in the given order. An explicit tier ending at year Y
    covers up to ``Y - covered`` years; the sentinel tier covers whatever is
    left. The rate sum is divided by the full term, so a schedule that stops
    short of the term is diluted rather than extended.
    An empty schedule yields the fallback rate.
    """
    if not tiers:
        return FALLBACK_ANNUAL_RATE

    covered = 0
    rate_sum = ZERO
    for tier in tiers:
        remaining = max(0, years - covered)
        if tier.is_sentinel:
            in_tier = remaining
        else:
            in_tier = min(tier.year - covered, remaining)
        if in_tier <= 0:
            continue
        rate_sum += tier.rate * in_tier
        covered += in_tier
        if covered >= years:
            break

    return rate_sum / max(years, 1)


def tiered_monthly_payment(principal: Decimal, tiers: Sequence[RateTier], years: int) -> Decimal:
    """Monthly payment at the schedule's blended rate over the whole term."""
    return monthly_payment(principal, blended_rate(tiers, years), years)


def _rate_for_year(tiers: Sequence[RateTier], year: int) -> Decimal:
    for tier in tiers:
        if year <= tier.year:
            return tier.rate
    return tiers[-1].rate if tiers else ZERO


def build_amortization_preview(
    loan_amount: Decimal,
    tiers: Sequence[RateTier],
    years: int,
    payment: Decimal,
) -> list[AmortizationRow]:
    """Build the first-year principal/interest split for a chosen offer.

    Each month uses the rate of the first tier covering its year. Returns an
    empty list when any input is missing or zero.
    """
    if not loan_amount or not tiers or not years or not payment:
        return []

    rows: list[AmortizationRow] = []
    balance = Decimal(loan_amount)
    for month in range(1, PREVIEW_MONTHS + 1):
        year = (month + MONTHS_PER_YEAR - 1) // MONTHS_PER_YEAR
        interest = balance * _monthly_rate(_rate_for_year(tiers, year))
        principal = payment - interest
        balance -= principal
        rows.append(
            AmortizationRow(
                month=month,
                payment=payment,
                principal=principal,
                interest=interest,
                balance=max(ZERO, balance),
            )
        )
    return rows
