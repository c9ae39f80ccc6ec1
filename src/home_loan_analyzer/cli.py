"""Command-line front end: click entry point + rich rendering.

Session:
  1. Load the promotion catalog (file or URL), optionally keep only the
     promotions active on a given date.
  2. Collect borrower input from options, prompting for house price, age
     and salary when they are not given.
  3. Analyze every promotion, show the best offer, the comparison table
     and the first-year amortization preview.
"""
from __future__ import annotations

import logging
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Sequence

import click
from rich import box
from rich.console import Console
from rich.markup import escape
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .analyzer import Offer, active_promotions, compare_offers, pick_best
from .calculator import AmortizationRow, build_amortization_preview
from .config import SENTINEL_YEAR
from .fetcher import FetchError, load_catalog
from .promotions import Promotion
from .resolver import InvalidInputError, resolve_borrower

console = Console()
err_console = Console(stderr=True, style="bold red")

logger = logging.getLogger(__name__)

_VERDICT_STYLES = {"good": "green", "ok": "yellow", "bad": "red"}

# ──────────────────────────────────────────────────────────────────────────────
# Formatting helpers
# ──────────────────────────────────────────────────────────────────────────────

def _fmt_money(value: Decimal) -> str:
    return f"{value:,.0f} THB"


def _fmt_pct(value: Decimal) -> str:
    return f"{value:.1f}%"


def _fmt_verdict(verdict: str, verdict_class: str) -> str:
    style = _VERDICT_STYLES.get(verdict_class, "white")
    return f"[{style}]{verdict}[/{style}]"


def _fmt_tiers(promotion: Promotion) -> str:
    if not promotion.rates:
        return "-"
    parts = []
    for tier in promotion.rates:
        label = "after" if tier.year == SENTINEL_YEAR else f"yr {tier.year}"
        text = f"{label}: {tier.rate:.2f}%"
        if tier.description:
            text += f" ({tier.description})"
        parts.append(text)
    return "\n".join(parts)


# ──────────────────────────────────────────────────────────────────────────────
# Result display
# ──────────────────────────────────────────────────────────────────────────────

def display_best_offer(offer: Offer) -> None:
    result = offer.analysis

    console.print()
    if result.final_loan_amount <= 0:
        console.print(Panel(
            f"[bold red]No qualifying offer[/bold red]\n"
            f"Best candidate {result.bank_name} / {result.promo_name}: "
            f"{_fmt_verdict(result.verdict, result.verdict_class)}",
            expand=False,
        ))
        return

    console.print(Panel(
        f"[bold green]Best Offer[/bold green]: {result.bank_name} / {result.promo_name}",
        expand=False,
    ))

    t = Table(box=box.SIMPLE, show_header=False, padding=(0, 2))
    t.add_column("Field", style="cyan")
    t.add_column("Value", justify="right")

    t.add_row("Loan amount", _fmt_money(result.final_loan_amount))
    t.add_row("Monthly payment", _fmt_money(result.monthly_payment))
    t.add_row("Term", f"{result.max_term} years")
    t.add_row("DSR", _fmt_pct(result.final_dsr))
    t.add_row("Assessable income", _fmt_money(result.total_assessable_income))
    t.add_row("  └ after acceptance ratio", _fmt_money(result.final_assessable_income))
    t.add_row("Max loan by affordability", _fmt_money(result.max_loan_by_affordability))
    t.add_row("Rate schedule", escape(_fmt_tiers(offer.promotion)))
    t.add_row("Verdict", _fmt_verdict(result.verdict, result.verdict_class))
    console.print(t)


def display_comparison(offers: list[Offer]) -> None:
    t = Table(title="Promotion Comparison", box=box.SIMPLE_HEAVY, show_header=True, padding=(0, 1))
    t.add_column("Bank", style="cyan")
    t.add_column("Promotion")
    t.add_column("Term", justify="right")
    t.add_column("Loan", justify="right")
    t.add_column("Monthly", justify="right")
    t.add_column("DSR", justify="right")
    t.add_column("Verdict")

    for offer in offers:
        result = offer.analysis
        t.add_row(
            result.bank_name,
            result.promo_name,
            str(result.max_term),
            f"{result.final_loan_amount:,.0f}",
            f"{result.monthly_payment:,.0f}",
            _fmt_pct(result.final_dsr),
            _fmt_verdict(result.verdict, result.verdict_class),
        )
    console.print(t)


def display_rate_structures(offers: list[Offer]) -> None:
    t = Table(title="Rate Structure", box=box.SIMPLE, show_header=True, padding=(0, 1))
    t.add_column("Promotion", style="cyan")
    t.add_column("Years")
    t.add_column("Rate", justify="right")
    t.add_column("Detail", overflow="fold")

    for offer in offers:
        name = f"{offer.promotion.bank_name} / {offer.promotion.promo_name}"
        covered = 0
        for tier in offer.promotion.rates:
            years = f"{covered + 1}+" if tier.is_sentinel else f"{covered + 1}-{tier.year}"
            t.add_row(name, years, f"{tier.rate:.2f}%", escape(tier.description or "-"))
            name = ""
            if not tier.is_sentinel:
                covered = tier.year
    console.print(t)


def display_amortization(rows: list[AmortizationRow]) -> None:
    t = Table(title="Amortization Preview (first 12 months)", box=box.MINIMAL_HEAVY_HEAD)
    for col in ("Month", "Payment", "Principal", "Interest", "Balance"):
        t.add_column(col, justify="right")

    for row in rows:
        t.add_row(
            str(row.month),
            f"{row.payment:,.0f}",
            f"{row.principal:,.0f}",
            f"{row.interest:,.0f}",
            f"{row.balance:,.0f}",
        )
    console.print(t)


# ──────────────────────────────────────────────────────────────────────────────
# Input helpers
# ──────────────────────────────────────────────────────────────────────────────

def _prompt_decimal(prompt: str, *, allow_zero: bool = False) -> Decimal:
    while True:
        raw = console.input(f"[bold]{prompt}[/bold] ").strip()
        try:
            value = Decimal(raw.replace(",", "").replace(" ", ""))
        except InvalidOperation:
            err_console.print(f"  Invalid number: '{raw}'")
            continue
        if not value.is_finite():
            err_console.print(f"  Invalid number: '{raw}'")
            continue
        if value < 0 or (value == 0 and not allow_zero):
            err_console.print("  Value must be >= 0." if allow_zero else "  Value must be > 0.")
            continue
        return value


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
    logging.getLogger("home_loan_analyzer").setLevel(logging.DEBUG if verbose else logging.INFO)


def _fail(message: str) -> None:
    err_console.print(escape(message))
    sys.exit(1)


# ──────────────────────────────────────────────────────────────────────────────
# Analysis runner
# ──────────────────────────────────────────────────────────────────────────────

def select_for_comparison(offers: list[Offer], ids: Sequence[str]) -> list[Offer]:
    """Keep the offers whose promotion id or name is in *ids*, in catalog order."""
    if not ids:
        return offers
    wanted = set(ids)
    known = {o.promotion.id for o in offers} | {o.promotion.promo_name for o in offers}
    unknown = sorted(wanted - known)
    if unknown:
        raise InvalidInputError(f"Unknown promotion for --promo: {', '.join(unknown)}")
    return [
        offer for offer in offers
        if offer.promotion.id in wanted or offer.promotion.promo_name in wanted
    ]


def run_analysis(
    promotions: list[Promotion],
    borrower_raw: dict[str, Any],
    *,
    show_comparison: bool = True,
    show_schedule: bool = True,
    compare_ids: Sequence[str] = (),
) -> Optional[Offer]:
    """Resolve the borrower, analyze the catalog and render the results.

    The best offer is picked from the whole catalog; *compare_ids*, when
    given, limits the comparison table to those promotions (by id or name).
    Returns the best offer, or None when the catalog is empty.
    Raises InvalidInputError for unacceptable borrower input or an unknown
    promotion in *compare_ids*.
    """
    borrower = resolve_borrower(borrower_raw)

    if not promotions:
        console.print(Panel("[yellow]No promotions available to analyze.[/yellow]", expand=False))
        return None

    offers = compare_offers(promotions, borrower)
    best = pick_best(offers)
    if best is None:
        return None
    logger.debug("Best offer: %s / %s", best.analysis.bank_name, best.analysis.promo_name)
    compared = select_for_comparison(offers, compare_ids)

    display_best_offer(best)
    if show_comparison:
        display_comparison(compared)
        display_rate_structures(compared)
    if show_schedule:
        rows = build_amortization_preview(
            best.analysis.final_loan_amount,
            best.promotion.rates,
            best.analysis.max_term,
            best.analysis.monthly_payment,
        )
        if rows:
            display_amortization(rows)
    return best


# ──────────────────────────────────────────────────────────────────────────────
# Click entry point
# ──────────────────────────────────────────────────────────────────────────────

def _income_options(prefix: str, who: str):
    """Shared income/debt options for the borrower and the co-borrower."""
    opts = [
        click.option(f"--{prefix}bonus", type=str, default=None, help=f"{who} annual bonus"),
        click.option(f"--{prefix}ot", type=str, default=None, help=f"{who} overtime total"),
        click.option(f"--{prefix}ot-months", type=str, default=None, help="Months the overtime was earned over"),
        click.option(f"--{prefix}commission", type=str, default=None, help=f"{who} commission total"),
        click.option(f"--{prefix}commission-months", type=str, default=None, help="Months the commission was earned over"),
        click.option(f"--{prefix}other-income", type=str, default=None, help=f"{who} other income total"),
        click.option(f"--{prefix}other-income-months", type=str, default=None, help="Months the other income was earned over"),
        click.option(f"--{prefix}debt", type=str, default=None, help=f"{who} existing monthly debt payments"),
    ]

    def decorator(f):
        for opt in reversed(opts):
            f = opt(f)
        return f
    return decorator


@click.command()
@click.option("--catalog", "catalog_source", type=str, required=True, help="Promotion catalog: JSON file path or http(s) URL")
@click.option("--api-key", type=str, default=None, help="API key for a remote catalog (default: $HOME_LOAN_API_KEY)")
@click.option("--active-on", type=str, default=None, help="Only analyze promotions active on this date (YYYY-MM-DD)")
@click.option("--house-price", type=str, default=None, help="House price")
@click.option("--age", type=str, default=None, help="Borrower age")
@click.option("--term", type=str, default=None, help="Desired loan term in years (default: longest allowed)")
@click.option("--salary", type=str, default=None, help="Borrower monthly salary")
@_income_options("", "Borrower")
@click.option("--co-borrower/--no-co-borrower", default=False, help="Include a co-borrower")
@click.option("--co-age", type=str, default=None, help="Co-borrower age")
@click.option("--co-salary", type=str, default=None, help="Co-borrower monthly salary")
@_income_options("co-", "Co-borrower")
@click.option("--compare/--no-compare", default=True, show_default=True, help="Show every promotion side by side")
@click.option("--promo", "promo_ids", multiple=True, help="Promotion id or name to include in the comparison (repeatable)")
@click.option("--schedule/--no-schedule", default=True, show_default=True, help="Show the 12-month amortization preview")
@click.option("--verbose", is_flag=True, default=False, help="Log every analysis step")
def main(catalog_source: str, api_key: Optional[str], active_on: Optional[str], house_price: Optional[str],
         age: Optional[str], term: Optional[str], salary: Optional[str], co_borrower: bool,
         co_age: Optional[str], co_salary: Optional[str],
         compare: bool, promo_ids: tuple[str, ...], schedule: bool, verbose: bool, **income: Optional[str]) -> None:
    """Home loan affordability analysis across bank promotions."""
    _configure_logging(verbose)
    console.print(Panel("[bold blue]Home Loan Analyzer[/bold blue]", expand=False))

    try:
        promotions = load_catalog(catalog_source, api_key)
    except FetchError as exc:
        _fail(f"Catalog error: {exc}")
    except InvalidInputError as exc:
        _fail(f"Invalid catalog: {exc}")

    if active_on is not None:
        try:
            on = date.fromisoformat(active_on)
        except ValueError:
            _fail(f"Invalid --active-on value '{active_on}'. Use YYYY-MM-DD.")
        promotions = active_promotions(promotions, on)
        logger.info("%d promotions active on %s", len(promotions), on.isoformat())

    # Collect mandatory fields (from CLI args or interactive prompt)
    if house_price is None:
        house_price = str(_prompt_decimal("House price?"))
    if age is None:
        age = str(_prompt_decimal("Borrower age?"))
    if salary is None:
        salary = str(_prompt_decimal("Monthly salary?", allow_zero=True))

    borrower_raw: dict[str, Any] = {
        "house_price": house_price,
        "age": age,
        "desired_term": term,
        "salary": salary,
        "has_co_borrower": co_borrower,
    }
    co_raw: dict[str, Any] = {"age": co_age, "salary": co_salary}
    for key, value in income.items():
        if key.startswith("co_"):
            co_raw[key[len("co_"):]] = value
        else:
            borrower_raw[key] = value
    borrower_raw["co_borrower"] = co_raw

    try:
        run_analysis(
            promotions,
            borrower_raw,
            show_comparison=compare,
            show_schedule=schedule,
            compare_ids=promo_ids,
        )
    except InvalidInputError as exc:
        _fail(f"Invalid input: {exc}")
