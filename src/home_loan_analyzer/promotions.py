"""Promotion and bank records.

A promotion is read-only to the analysis: the resolver builds it once from a
raw catalog row, with every policy default already applied.
Rates are stored as percent per annum (e.g. Decimal("3.5") for 3.5%).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from .config import (
    DEFAULT_DSR_CEILING,
    DEFAULT_INCOME_ACCEPTANCE_RATIO,
    DEFAULT_INCOME_RULES,
    DEFAULT_LOAN_CALC_METHOD,
    DEFAULT_MAX_LOAN_AGE,
    DEFAULT_MAX_LTV,
    DEFAULT_MULTIPLIER,
    DEFAULT_PER_MILLION_RATE,
    REFERENCE_RATES,
    SENTINEL_YEAR,
    LoanCalcMethod,
)


@dataclass(frozen=True)
class RateTier:
    year: int           # last year the tier applies to, or SENTINEL_YEAR
    rate: Decimal       # % p.a.
    description: str = ""

    @property
    def is_sentinel(self) -> bool:
        return self.year == SENTINEL_YEAR


@dataclass(frozen=True)
class IncomeRules:
    """Recognition percentage per income component."""
    salary: Decimal = DEFAULT_INCOME_RULES["salary"]
    bonus: Decimal = DEFAULT_INCOME_RULES["bonus"]
    ot: Decimal = DEFAULT_INCOME_RULES["ot"]
    commission: Decimal = DEFAULT_INCOME_RULES["commission"]
    other: Decimal = DEFAULT_INCOME_RULES["other"]


@dataclass(frozen=True)
class Bank:
    bank_name: str
    # Reference rates keyed by name (MRR / MLR / MOR), % p.a.
    reference_rates: dict[str, Decimal] = field(default_factory=dict)

    def reference_rate(self, name: str) -> Decimal:
        key = name.upper()
        if key not in REFERENCE_RATES:
            raise ValueError(
                f"Unknown reference rate '{name}'. "
                f"Valid values: {', '.join(sorted(REFERENCE_RATES))}"
            )
        if key not in self.reference_rates:
            raise ValueError(f"Bank '{self.bank_name}' has no current {key} configured.")
        return self.reference_rates[key]


def floating_tier(bank: Bank, reference: str, spread: Decimal, year: int = SENTINEL_YEAR) -> RateTier:
    """Build a tier priced as ``reference rate - spread`` for *bank*."""
    base = bank.reference_rate(reference)
    return RateTier(
        year=year,
        rate=base - spread,
        description=f"{reference.upper()} ({base:.2f}%) - {spread:.2f}%",
    )


@dataclass(frozen=True)
class Promotion:
    bank_name: str
    promo_name: str
    rates: tuple                                # tuple[RateTier, ...], ascending year
    max_loan_ltv: Decimal = DEFAULT_MAX_LTV
    max_loan_amount: Optional[Decimal] = None   # None means no absolute cap
    max_loan_age: int = DEFAULT_MAX_LOAN_AGE
    dsr_ceiling: Decimal = DEFAULT_DSR_CEILING
    income_rules: IncomeRules = IncomeRules()
    income_acceptance_ratio: Decimal = DEFAULT_INCOME_ACCEPTANCE_RATIO
    loan_calc_method: LoanCalcMethod = DEFAULT_LOAN_CALC_METHOD
    multiplier: Decimal = DEFAULT_MULTIPLIER
    per_million_rate: Decimal = DEFAULT_PER_MILLION_RATE
    # Catalog metadata
    id: Optional[str] = None
    promo_start_date: Optional[date] = None
    promo_end_date: Optional[date] = None
    contract_end_date: Optional[date] = None

    def is_active(self, on: date) -> bool:
        """True when *on* falls inside the promotion window (open ends unbounded)."""
        if self.promo_start_date is not None and on < self.promo_start_date:
            return False
        if self.promo_end_date is not None and on > self.promo_end_date:
            return False
        return True
