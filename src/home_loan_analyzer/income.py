"""Assessable income per lender recognition rules."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .config import HUNDRED, MONTHS_PER_YEAR, ZERO
from .promotions import IncomeRules, Promotion
from .resolver import Borrower, Person


@dataclass(frozen=True)
class IncomeAssessment:
    total: Decimal      # recognised monthly income, before the acceptance haircut
    final: Decimal      # after the promotion's income_acceptance_ratio


def _monthly_average(total: Decimal, months: int) -> Decimal:
    average = total / max(months, 1)
    return average if average.is_finite() else ZERO


def recognized_income(person: Person, rules: IncomeRules) -> Decimal:
    """Monthly income a lender recognises for one person."""
    return (
        person.salary * (rules.salary / HUNDRED)
        + (person.bonus / MONTHS_PER_YEAR) * (rules.bonus / HUNDRED)
        + _monthly_average(person.ot, person.ot_months) * (rules.ot / HUNDRED)
        + _monthly_average(person.commission, person.commission_months) * (rules.commission / HUNDRED)
        + _monthly_average(person.other_income, person.other_income_months) * (rules.other / HUNDRED)
    )


def assess_income(borrower: Borrower, promotion: Promotion) -> IncomeAssessment:
    rules = promotion.income_rules
    total = recognized_income(borrower.primary, rules)
    if borrower.has_co_borrower:
        total += recognized_income(borrower.co_borrower, rules)
    final = total * (promotion.income_acceptance_ratio / HUNDRED)
    return IncomeAssessment(total=total, final=final)
