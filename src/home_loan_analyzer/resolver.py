"""Boundary validation and defaulting for borrower input and catalog rows.

Resolution rules:
1. Missing numeric borrower fields default to 0; missing or zero month counts to 1.
2. Missing promotion policy fields take the defaults from config.
3. Rate tiers are sorted ascending by year; floating tiers are priced from
   the bank's current reference rate.
4. Negative or non-numeric values are rejected with InvalidInputError.

Nothing past this module re-derives a default.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from .config import (
    DEFAULT_DSR_CEILING,
    DEFAULT_INCOME_ACCEPTANCE_RATIO,
    DEFAULT_INCOME_RULES,
    DEFAULT_LOAN_CALC_METHOD,
    DEFAULT_MAX_LOAN_AGE,
    DEFAULT_MAX_LTV,
    DEFAULT_MULTIPLIER,
    DEFAULT_PER_MILLION_RATE,
    SENTINEL_YEAR,
    VALID_LOAN_CALC_METHODS,
    ZERO,
)
from .promotions import Bank, IncomeRules, Promotion, RateTier, floating_tier

logger = logging.getLogger(__name__)


class InvalidInputError(ValueError):
    """Raised when a borrower value or catalog row cannot be accepted."""


@dataclass(frozen=True)
class Person:
    """Income shape shared by the borrower and the co-borrower."""
    age: int = 0
    salary: Decimal = ZERO              # monthly
    bonus: Decimal = ZERO               # annual
    ot: Decimal = ZERO                  # total earned over ot_months
    ot_months: int = 1
    commission: Decimal = ZERO
    commission_months: int = 1
    other_income: Decimal = ZERO
    other_income_months: int = 1
    debt: Decimal = ZERO                # existing monthly obligations


@dataclass(frozen=True)
class Borrower:
    house_price: Decimal
    primary: Person
    desired_term: Optional[int] = None   # None means no borrower preference
    co_borrower: Optional[Person] = None

    @property
    def has_co_borrower(self) -> bool:
        return self.co_borrower is not None


# ──────────────────────────────────────────────────────────────────────────────
# Scalar parsing
# ──────────────────────────────────────────────────────────────────────────────

_TRUE_WORDS = frozenset({"true", "yes", "y", "1", "on"})
_FALSE_WORDS = frozenset({"false", "no", "n", "0", "off"})


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _to_decimal(value: Any, name: str, default: Decimal = ZERO) -> Decimal:
    if _is_missing(value):
        return default
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got {value!r}.")
    try:
        result = Decimal(str(value).replace(",", "").strip())
    except InvalidOperation:
        raise InvalidInputError(f"{name} must be a number, got {value!r}.") from None
    if not result.is_finite():
        raise InvalidInputError(f"{name} must be finite, got {value!r}.")
    if result < ZERO:
        raise InvalidInputError(f"{name} must be >= 0, got {value!r}.")
    return result


def _to_int(value: Any, name: str, default: int = 0) -> int:
    if _is_missing(value):
        return default
    number = _to_decimal(value, name)
    if number != number.to_integral_value():
        raise InvalidInputError(f"{name} must be a whole number, got {value!r}.")
    return int(number)


def _to_months(value: Any, name: str) -> int:
    months = _to_int(value, name, default=1)
    return months if months >= 1 else 1


def _to_bool(value: Any, name: str) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise InvalidInputError(f"{name} must be true or false, got {value!r}.")


def _require_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if _is_missing(value):
        return {}
    if not isinstance(value, Mapping):
        raise InvalidInputError(f"{name} must be an object, got {type(value).__name__}.")
    return value


def _require_list(value: Any, name: str) -> list:
    if _is_missing(value):
        return []
    if not isinstance(value, list):
        raise InvalidInputError(f"{name} must be a list, got {type(value).__name__}.")
    return value


def _to_date(value: Any, name: str) -> Optional[date]:
    if _is_missing(value):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise InvalidInputError(f"{name} must be an ISO date (YYYY-MM-DD), got {value!r}.") from None


# ──────────────────────────────────────────────────────────────────────────────
# Borrower
# ──────────────────────────────────────────────────────────────────────────────

def resolve_person(raw: Mapping[str, Any], prefix: str = "") -> Person:
    raw = _require_mapping(raw, prefix.rstrip(".") or "borrower")

    def _name(field_name: str) -> str:
        return f"{prefix}{field_name}"

    return Person(
        age=_to_int(raw.get("age"), _name("age")),
        salary=_to_decimal(raw.get("salary"), _name("salary")),
        bonus=_to_decimal(raw.get("bonus"), _name("bonus")),
        ot=_to_decimal(raw.get("ot"), _name("ot")),
        ot_months=_to_months(raw.get("ot_months"), _name("ot_months")),
        commission=_to_decimal(raw.get("commission"), _name("commission")),
        commission_months=_to_months(raw.get("commission_months"), _name("commission_months")),
        other_income=_to_decimal(raw.get("other_income"), _name("other_income")),
        other_income_months=_to_months(raw.get("other_income_months"), _name("other_income_months")),
        debt=_to_decimal(raw.get("debt"), _name("debt")),
    )


def resolve_borrower(raw: Mapping[str, Any]) -> Borrower:
    """Validate raw borrower input and return a fully-specified Borrower."""
    raw = _require_mapping(raw, "borrower")
    desired_term: Optional[int] = None
    if not _is_missing(raw.get("desired_term")):
        desired_term = _to_int(raw["desired_term"], "desired_term")
        if desired_term < 1:
            raise InvalidInputError(f"desired_term must be >= 1 year, got {desired_term}.")

    co_borrower: Optional[Person] = None
    if _to_bool(raw.get("has_co_borrower"), "has_co_borrower"):
        co_borrower = resolve_person(raw.get("co_borrower"), prefix="co_borrower.")

    return Borrower(
        house_price=_to_decimal(raw.get("house_price"), "house_price"),
        primary=resolve_person(raw),
        desired_term=desired_term,
        co_borrower=co_borrower,
    )


# ──────────────────────────────────────────────────────────────────────────────
# Banks and promotions
# ──────────────────────────────────────────────────────────────────────────────

_REFERENCE_KEYS = {"MRR": "current_mrr", "MLR": "current_mlr", "MOR": "current_mor"}


def resolve_bank(raw: Mapping[str, Any]) -> Bank:
    name = str(raw.get("bank_name") or "").strip()
    if not name:
        raise InvalidInputError("bank_name is required for every bank row.")
    reference_rates: dict[str, Decimal] = {}
    for ref, key in _REFERENCE_KEYS.items():
        if not _is_missing(raw.get(key)):
            reference_rates[ref] = _to_decimal(raw[key], f"{name}.{key}")
    return Bank(bank_name=name, reference_rates=reference_rates)


def resolve_banks(rows: list) -> dict[str, Bank]:
    banks = [resolve_bank(row) for row in rows]
    return {bank.bank_name: bank for bank in banks}


def _resolve_tier(raw: Any, name: str, bank: Optional[Bank]) -> RateTier:
    if not isinstance(raw, Mapping):
        raise InvalidInputError(f"{name} must be an object, got {type(raw).__name__}.")
    year = _to_int(raw.get("year"), f"{name}.year")
    if year < 1:
        raise InvalidInputError(f"{name}.year must be >= 1 (or {SENTINEL_YEAR}), got {year}.")

    reference = raw.get("reference")
    if not _is_missing(reference):
        if bank is None:
            raise InvalidInputError(
                f"{name} uses reference rate {reference!r} but its bank is not in the catalog."
            )
        spread = _to_decimal(raw.get("spread"), f"{name}.spread")
        try:
            tier = floating_tier(bank, str(reference), spread, year=year)
        except ValueError as exc:
            raise InvalidInputError(f"{name}: {exc}") from exc
        if tier.rate < ZERO:
            raise InvalidInputError(f"{name}: spread {spread} exceeds the reference rate.")
        return tier

    if _is_missing(raw.get("rate")):
        raise InvalidInputError(f"{name}.rate is required.")
    return RateTier(
        year=year,
        rate=_to_decimal(raw.get("rate"), f"{name}.rate"),
        description=str(raw.get("description") or ""),
    )


def _policy_decimal(raw: Mapping[str, Any], key: str, default: Decimal, label: str) -> Decimal:
    # 0 is treated as "not set" for policy percentages and the multiplier.
    value = _to_decimal(raw.get(key), f"{label}.{key}", default)
    return value if value > ZERO else default


def resolve_promotion(raw: Mapping[str, Any], banks: Optional[Mapping[str, Bank]] = None) -> Promotion:
    """Apply every policy default to a raw promotion row."""
    bank_name = str(raw.get("bank_name") or "").strip()
    promo_name = str(raw.get("name") or raw.get("promo_name") or "").strip()
    if not bank_name or not promo_name:
        raise InvalidInputError("Every promotion needs a bank_name and a name.")
    label = f"{bank_name}/{promo_name}"
    bank = (banks or {}).get(bank_name)

    tiers = [
        _resolve_tier(row, f"{label}.rates[{i}]", bank)
        for i, row in enumerate(_require_list(raw.get("rates"), f"{label}.rates"))
    ]
    tiers.sort(key=lambda tier: tier.year)

    method = str(raw.get("loan_calc_method") or DEFAULT_LOAN_CALC_METHOD).strip().lower()
    if method not in VALID_LOAN_CALC_METHODS:
        raise InvalidInputError(
            f"{label}: unknown loan_calc_method '{method}'. "
            f"Valid values: {', '.join(sorted(VALID_LOAN_CALC_METHODS))}"
        )

    cap_raw = raw.get("max_loan_amount")
    if _is_missing(cap_raw):
        cap_raw = raw.get("max_loan_amount_thb")
    max_loan_amount: Optional[Decimal] = _to_decimal(cap_raw, f"{label}.max_loan_amount")
    if not max_loan_amount:
        max_loan_amount = None

    rules_raw = _require_mapping(raw.get("income_rules"), f"{label}.income_rules")
    income_rules = IncomeRules(**{
        key: _to_decimal(rules_raw.get(key), f"{label}.income_rules.{key}", default)
        for key, default in DEFAULT_INCOME_RULES.items()
    })

    max_loan_age = _to_int(raw.get("max_loan_age"), f"{label}.max_loan_age", DEFAULT_MAX_LOAN_AGE)

    promotion = Promotion(
        bank_name=bank_name,
        promo_name=promo_name,
        rates=tuple(tiers),
        max_loan_ltv=_policy_decimal(raw, "max_loan_ltv", DEFAULT_MAX_LTV, label),
        max_loan_amount=max_loan_amount,
        max_loan_age=max_loan_age or DEFAULT_MAX_LOAN_AGE,
        dsr_ceiling=_policy_decimal(raw, "dsr_ceiling", DEFAULT_DSR_CEILING, label),
        income_rules=income_rules,
        income_acceptance_ratio=_policy_decimal(
            raw, "income_acceptance_ratio", DEFAULT_INCOME_ACCEPTANCE_RATIO, label
        ),
        loan_calc_method=method,  # type: ignore[arg-type]
        multiplier=_policy_decimal(raw, "multiplier", DEFAULT_MULTIPLIER, label),
        per_million_rate=_to_decimal(
            raw.get("per_million_rate"), f"{label}.per_million_rate", DEFAULT_PER_MILLION_RATE
        ),
        id=None if raw.get("id") is None else str(raw["id"]),
        promo_start_date=_to_date(raw.get("promo_start_date"), f"{label}.promo_start_date"),
        promo_end_date=_to_date(raw.get("promo_end_date"), f"{label}.promo_end_date"),
        contract_end_date=_to_date(raw.get("contract_end_date"), f"{label}.contract_end_date"),
    )
    if not promotion.rates:
        logger.debug("%s has no rate tiers; fallback rate will apply", label)
    return promotion


def resolve_catalog(raw: Any) -> list[Promotion]:
    """Resolve a catalog: a bare list of promotion rows, or {"banks", "promotions"}."""
    if isinstance(raw, list):
        bank_rows: list = []
        promo_rows = raw
    elif isinstance(raw, Mapping):
        bank_rows = _require_list(raw.get("banks"), "banks")
        promo_rows = _require_list(raw.get("promotions"), "promotions")
    else:
        raise InvalidInputError(
            f"Catalog must be a list of promotions or an object with 'promotions', "
            f"got {type(raw).__name__}."
        )

    for row in (*bank_rows, *promo_rows):
        if not isinstance(row, Mapping):
            raise InvalidInputError(f"Catalog rows must be objects, got {type(row).__name__}.")

    banks = resolve_banks(bank_rows)
    promotions = [resolve_promotion(row, banks) for row in promo_rows]
    logger.debug("Resolved %d promotions across %d banks", len(promotions), len(banks))
    return promotions
