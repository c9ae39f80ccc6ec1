"""Unit tests for calculator.py: amortization math, tier blending, preview."""
from decimal import Decimal

import pytest

from home_loan_analyzer.calculator import (
    blended_rate,
    build_amortization_preview,
    max_loan_from_payment,
    monthly_payment,
    tiered_monthly_payment,
)
from home_loan_analyzer.promotions import RateTier

ZERO = Decimal("0")
CENT = Decimal("0.01")


def _tiers(*pairs):
    return tuple(RateTier(year=year, rate=Decimal(str(rate))) for year, rate in pairs)


class TestMonthlyPayment:
    def test_known_value(self):
        # P=1 000 000, 6% p.a., 30 years → 5 995.51
        result = monthly_payment(Decimal("1000000"), Decimal("6"), 30)
        assert abs(result - Decimal("5995.51")) < CENT

    def test_zero_interest_is_straight_line(self):
        assert monthly_payment(Decimal("1200000"), ZERO, 10) == Decimal("10000")

    def test_zero_years(self):
        assert monthly_payment(Decimal("100000"), Decimal("5"), 0) == ZERO

    def test_zero_principal(self):
        assert monthly_payment(ZERO, Decimal("5"), 30) == ZERO


class TestMaxLoanFromPayment:
    def test_zero_interest(self):
        assert max_loan_from_payment(Decimal("10000"), ZERO, 10) == Decimal("1200000")

    def test_zero_years(self):
        assert max_loan_from_payment(Decimal("10000"), Decimal("5"), 0) == ZERO

    @pytest.mark.parametrize("principal,rate,years", [
        (Decimal("1000000"), Decimal("3"), 30),
        (Decimal("2500000"), Decimal("5.75"), 20),
        (Decimal("480000"), Decimal("0.5"), 1),
        (Decimal("7300000"), Decimal("7.3"), 40),
    ])
    def test_inverts_monthly_payment(self, principal, rate, years):
        payment = monthly_payment(principal, rate, years)
        assert abs(max_loan_from_payment(payment, rate, years) - principal) < Decimal("0.0001")

    def test_higher_rate_carries_smaller_loan(self):
        low = max_loan_from_payment(Decimal("20000"), Decimal("3"), 30)
        high = max_loan_from_payment(Decimal("20000"), Decimal("6"), 30)
        assert high < low


class TestBlendedRate:
    def test_single_sentinel_is_flat_rate(self):
        assert blended_rate(_tiers((99, 5)), 20) == Decimal("5")

    def test_single_sentinel_payment_equals_flat_amortization(self):
        principal = Decimal("3000000")
        assert tiered_monthly_payment(principal, _tiers((99, 5)), 25) == monthly_payment(
            principal, Decimal("5"), 25
        )

    def test_intro_year_then_sentinel(self):
        # (3×1 + 5×4) / 5
        assert blended_rate(_tiers((1, 3), (99, 5)), 5) == Decimal("4.6")

    def test_three_tier_schedule(self):
        # years 1-3 at 3%, 27 years at 6% → 171 / 30
        assert blended_rate(_tiers((3, 3), (99, 6)), 30) == Decimal("5.7")

    def test_cumulative_years(self):
        # year 1 at 2%, year 2 at 3%, year 3 at 4%, then 6%
        tiers = _tiers((1, 2), (2, 3), (3, 4), (99, 6))
        assert blended_rate(tiers, 5) == (Decimal("2") + 3 + 4 + 6 * 2) / 5

    def test_term_shorter_than_first_tier(self):
        assert blended_rate(_tiers((3, 3), (99, 6)), 2) == Decimal("3")

    def test_schedule_short_of_term_is_diluted(self):
        assert blended_rate(_tiers((3, 3)), 30) == Decimal("0.3")

    def test_empty_schedule_uses_fallback(self):
        assert blended_rate((), 30) == Decimal("3.5")

    def test_empty_schedule_payment_uses_fallback(self):
        principal = Decimal("2000000")
        assert tiered_monthly_payment(principal, (), 30) == monthly_payment(
            principal, Decimal("3.5"), 30
        )


class TestAmortizationPreview:
    def test_twelve_rows(self):
        rows = build_amortization_preview(
            Decimal("1200000"), _tiers((1, 6)), 20, Decimal("10000")
        )
        assert [row.month for row in rows] == list(range(1, 13))

    def test_first_month_split(self):
        rows = build_amortization_preview(
            Decimal("1200000"), _tiers((1, 6)), 20, Decimal("10000")
        )
        first = rows[0]
        # interest = 1 200 000 × 6% / 12
        assert first.interest == Decimal("6000")
        assert first.principal == Decimal("4000")
        assert first.balance == Decimal("1196000")
        assert first.payment == Decimal("10000")

    def test_uses_first_covering_tier(self):
        rows = build_amortization_preview(
            Decimal("1200000"), _tiers((1, 3), (99, 6)), 20, Decimal("10000")
        )
        assert rows[0].interest == Decimal("3000")

    def test_balance_decreases(self):
        principal = Decimal("2000000")
        tiers = _tiers((3, 3), (99, 6))
        payment = tiered_monthly_payment(principal, tiers, 30)
        rows = build_amortization_preview(principal, tiers, 30, payment)
        balances = [row.balance for row in rows]
        assert balances == sorted(balances, reverse=True)

    def test_balance_floored_at_zero(self):
        rows = build_amortization_preview(Decimal("1000"), _tiers((99, 5)), 1, Decimal("10000"))
        assert all(row.balance == ZERO for row in rows)

    @pytest.mark.parametrize("loan,tiers,years,payment", [
        (ZERO, _tiers((99, 5)), 20, Decimal("1000")),
        (Decimal("100000"), (), 20, Decimal("1000")),
        (Decimal("100000"), _tiers((99, 5)), 0, Decimal("1000")),
        (Decimal("100000"), _tiers((99, 5)), 20, ZERO),
    ])
    def test_missing_input_gives_no_rows(self, loan, tiers, years, payment):
        assert build_amortization_preview(loan, tiers, years, payment) == []
