"""Eligibility analysis per promotion and best-offer selection.

Decision sequence for one (promotion, borrower) pair:
1. assessable income (total and after the acceptance haircut)
2. maximum term from the age limit, the 40-year ceiling and the desired term
3. affordable payment = final income × DSR ceiling − existing debt
   (≤ 0 → "high debt burden / insufficient income")
4. loan sized by the promotion's strategy, then capped by the absolute
   limit, LTV and the house price (≤ 0 → "loan amount insufficient")
5. monthly payment at the full-schedule blended rate, DSR and verdict

DSR is measured against income *before* the acceptance haircut while the
loan is sized on income *after* it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from .calculator import tiered_monthly_payment
from .config import (
    DSR_TOLERANCE,
    HUNDRED,
    MAX_TERM_YEARS,
    RECOMMENDED_LOAN_RATIO,
    VERDICT_CLASSES,
    VERDICT_DEBT_TOO_HIGH,
    VERDICT_FEASIBLE,
    VERDICT_INSUFFICIENT_INCOME,
    VERDICT_LOAN_INSUFFICIENT,
    VERDICT_RECOMMENDED,
    ZERO,
    Verdict,
    VerdictClass,
)
from .income import assess_income
from .promotions import Promotion
from .resolver import Borrower
from .sizing import max_loan_by_affordability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    bank_name: str
    promo_name: str
    max_term: int
    total_assessable_income: Decimal    # combined, before the haircut
    final_assessable_income: Decimal    # after income_acceptance_ratio
    max_affordable_payment: Decimal
    max_loan_by_affordability: Decimal
    final_loan_amount: Decimal
    monthly_payment: Decimal
    final_dsr: Decimal                  # percent
    verdict: Verdict
    verdict_class: VerdictClass


@dataclass(frozen=True)
class Offer:
    promotion: Promotion
    analysis: AnalysisResult


def max_term_for(promotion: Promotion, borrower: Borrower) -> int:
    """Longest term the policy allows, limited by the borrower's desired term.

    With a co-borrower the older of the two ages sets the limit.
    """
    age = borrower.primary.age
    if borrower.has_co_borrower and borrower.co_borrower.age > 0:
        age = max(age, borrower.co_borrower.age)
    policy_term = max(1, min(promotion.max_loan_age - age, MAX_TERM_YEARS))
    if borrower.desired_term is None:
        return policy_term
    return min(borrower.desired_term, policy_term)


def total_debt_of(borrower: Borrower) -> Decimal:
    debt = borrower.primary.debt
    if borrower.has_co_borrower:
        debt += borrower.co_borrower.debt
    return debt


def _verdict(final_dsr: Decimal, final_loan: Decimal, promotion: Promotion, borrower: Borrower) -> Verdict:
    if final_dsr > promotion.dsr_ceiling + DSR_TOLERANCE:
        return VERDICT_DEBT_TOO_HIGH
    if final_loan >= borrower.house_price * RECOMMENDED_LOAN_RATIO:
        return VERDICT_RECOMMENDED
    return VERDICT_FEASIBLE


def analyze(promotion: Promotion, borrower: Borrower) -> AnalysisResult:
    """Evaluate one promotion for one borrower. Pure; never raises for outcomes."""
    label = f"{promotion.bank_name}/{promotion.promo_name}"
    income = assess_income(borrower, promotion)
    max_term = max_term_for(promotion, borrower)
    total_debt = total_debt_of(borrower)

    def _terminal(verdict: Verdict, affordable: Decimal = ZERO, by_affordability: Decimal = ZERO) -> AnalysisResult:
        logger.debug("%s: %s", label, verdict)
        return AnalysisResult(
            bank_name=promotion.bank_name,
            promo_name=promotion.promo_name,
            max_term=max_term,
            total_assessable_income=income.total,
            final_assessable_income=income.final,
            max_affordable_payment=affordable,
            max_loan_by_affordability=by_affordability,
            final_loan_amount=ZERO,
            monthly_payment=ZERO,
            final_dsr=ZERO,
            verdict=verdict,
            verdict_class=VERDICT_CLASSES[verdict],
        )

    max_affordable_payment = income.final * (promotion.dsr_ceiling / HUNDRED) - total_debt
    if max_affordable_payment <= ZERO:
        return _terminal(VERDICT_INSUFFICIENT_INCOME)

    by_affordability = max_loan_by_affordability(max_affordable_payment, promotion, max_term)
    capped = by_affordability
    if promotion.max_loan_amount is not None:
        capped = min(capped, promotion.max_loan_amount)
    max_loan_from_ltv = borrower.house_price * (promotion.max_loan_ltv / HUNDRED)
    final_loan = min(capped, max_loan_from_ltv, borrower.house_price)

    if final_loan <= ZERO:
        return _terminal(VERDICT_LOAN_INSUFFICIENT, max_affordable_payment, by_affordability)

    payment = tiered_monthly_payment(final_loan, promotion.rates, max_term)
    if income.total > ZERO:
        final_dsr = (payment + total_debt) / income.total * HUNDRED
    else:
        final_dsr = ZERO

    verdict = _verdict(final_dsr, final_loan, promotion, borrower)
    logger.debug(
        "%s: term=%d loan=%.2f payment=%.2f dsr=%.2f -> %s",
        label, max_term, final_loan, payment, final_dsr, verdict,
    )
    return AnalysisResult(
        bank_name=promotion.bank_name,
        promo_name=promotion.promo_name,
        max_term=max_term,
        total_assessable_income=income.total,
        final_assessable_income=income.final,
        max_affordable_payment=max_affordable_payment,
        max_loan_by_affordability=by_affordability,
        final_loan_amount=final_loan,
        monthly_payment=payment,
        final_dsr=final_dsr,
        verdict=verdict,
        verdict_class=VERDICT_CLASSES[verdict],
    )


# ── Catalog-level helpers ─────────────────────────────────────────────────────

def active_promotions(promotions: Iterable[Promotion], on: date) -> list[Promotion]:
    return [promo for promo in promotions if promo.is_active(on)]


def compare_offers(promotions: Iterable[Promotion], borrower: Borrower) -> list[Offer]:
    """Analyze every promotion independently, in catalog order."""
    return [Offer(promotion=promo, analysis=analyze(promo, borrower)) for promo in promotions]


def pick_best(offers: Iterable[Offer]) -> Optional[Offer]:
    """Return the offer with the strictly greatest final loan amount.

    Ties keep the first offer seen. No offers yields None.
    """
    best: Optional[Offer] = None
    for offer in offers:
        if best is None or offer.analysis.final_loan_amount > best.analysis.final_loan_amount:
            best = offer
    return best


def select_best_offer(promotions: Iterable[Promotion], borrower: Borrower) -> Optional[Offer]:
    return pick_best(compare_offers(promotions, borrower))
