"""Application-wide constants and policy defaults.

Every fallback the analysis relies on lives here so that the resolver can
apply them once, when a promotion or borrower record enters the system.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Literal

# ── Type aliases ──────────────────────────────────────────────────────────────

LoanCalcMethod = Literal["accurate", "multiplier", "per_million"]
Verdict = Literal[
    "high debt burden / insufficient income",
    "loan amount insufficient",
    "debt burden too high",
    "recommended",
    "feasible",
]
VerdictClass = Literal["bad", "good", "ok"]

# ── Rate schedule ─────────────────────────────────────────────────────────────

SENTINEL_YEAR: int = 99                 # tier covering all remaining years
FALLBACK_ANNUAL_RATE = Decimal("3.5")   # % p.a. when a promotion has no tiers
ACCURATE_RATE_TIERS: int = 3            # tiers averaged by the 'accurate' sizing
REFERENCE_RATES: frozenset[str] = frozenset({"MRR", "MLR", "MOR"})

# ── Promotion policy defaults ─────────────────────────────────────────────────

DEFAULT_MAX_LTV = Decimal("100")
DEFAULT_MAX_LOAN_AGE: int = 65
DEFAULT_DSR_CEILING = Decimal("55")
DEFAULT_INCOME_ACCEPTANCE_RATIO = Decimal("100")
DEFAULT_LOAN_CALC_METHOD: LoanCalcMethod = "accurate"
DEFAULT_MULTIPLIER = Decimal("150")
DEFAULT_PER_MILLION_RATE = Decimal("7000")

DEFAULT_INCOME_RULES: dict[str, Decimal] = {
    "salary": Decimal("100"),
    "bonus": Decimal("50"),
    "ot": Decimal("50"),
    "commission": Decimal("50"),
    "other": Decimal("50"),
}

VALID_LOAN_CALC_METHODS: frozenset[str] = frozenset({"accurate", "multiplier", "per_million"})

# ── Eligibility thresholds ────────────────────────────────────────────────────

MAX_TERM_YEARS: int = 40
DSR_TOLERANCE = Decimal("5")            # points above the ceiling before "too high"
RECOMMENDED_LOAN_RATIO = Decimal("0.95")

# ── Verdicts ──────────────────────────────────────────────────────────────────

VERDICT_INSUFFICIENT_INCOME: Verdict = "high debt burden / insufficient income"
VERDICT_LOAN_INSUFFICIENT: Verdict = "loan amount insufficient"
VERDICT_DEBT_TOO_HIGH: Verdict = "debt burden too high"
VERDICT_RECOMMENDED: Verdict = "recommended"
VERDICT_FEASIBLE: Verdict = "feasible"

VERDICT_CLASSES: dict[str, VerdictClass] = {
    VERDICT_INSUFFICIENT_INCOME: "bad",
    VERDICT_LOAN_INSUFFICIENT: "bad",
    VERDICT_DEBT_TOO_HIGH: "bad",
    VERDICT_RECOMMENDED: "good",
    VERDICT_FEASIBLE: "ok",
}

# ── Amortization preview ──────────────────────────────────────────────────────

PREVIEW_MONTHS: int = 12

# ── Catalog fetching ──────────────────────────────────────────────────────────

FETCH_TIMEOUT: int = 10                 # seconds
API_KEY_ENV_VAR: str = "HOME_LOAN_API_KEY"

# ── Numeric convenience ───────────────────────────────────────────────────────

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
MILLION = Decimal("1000000")
MONTHS_PER_YEAR: int = 12
