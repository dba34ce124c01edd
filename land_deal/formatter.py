"""Output helpers for the land deal planner.

This module provides functions to format money the Indian way (lakh/crore
digit grouping, ``₹`` prefix) and to render deal summaries, payment
schedules and plot timelines in a tabular text format for the terminal.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable

from .data_models import PaymentInstallment, PaymentScheduleItem
from .utils import round_half_up

CRORE = Decimal("10000000")
LAKH = Decimal("100000")


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_number(amount: Decimal, places: int = 2) -> str:
    """Format a number with Indian digit grouping, e.g. ``12,34,567.89``."""
    rounded = round_half_up(Decimal(amount), places)
    sign = "-" if rounded < 0 else ""
    text = f"{abs(rounded):.{places}f}"
    whole, _, fraction = text.partition(".")
    grouped = _group_indian(whole)
    return f"{sign}{grouped}.{fraction}" if fraction else f"{sign}{grouped}"


def format_currency(amount: Decimal) -> str:
    return f"₹{format_number(amount)}"


def format_currency_short(amount: Decimal) -> str:
    """Abbreviate large amounts to crore (Cr) or lakh (L)."""
    amount = Decimal(amount)
    if amount >= CRORE:
        return f"₹{round_half_up(amount / CRORE, 2):.2f} Cr"
    if amount >= LAKH:
        return f"₹{round_half_up(amount / LAKH, 2):.2f} L"
    return format_currency(amount)


def format_date(value: date) -> str:
    return value.strftime("%d %b %Y")


def print_summary(summary: Dict[str, object]) -> None:
    """Print the cost sheet of a deal in a human-readable format."""
    print("Cost Sheet")
    print("-" * 72)
    print(f"Area (sq mt)        : {format_number(summary['area_sq_mt'])}")
    print(f"Area (vigha)        : {summary['vigha_equivalent']:.4f}")
    print(f"Jantri value        : {format_currency(summary['total_jantri_value'])}")
    print(f"Stamp duty          : {format_currency(summary['stamp_duty'])}")
    print(f"Down payment        : {format_currency(summary['down_payment'])}")
    print(f"Per installment     : {format_currency(summary['installment_amount'])}")
    if summary.get("total_additional_expenses"):
        print(f"Other expenses      : {format_currency(summary['total_additional_expenses'])}")
    print(
        f"Landed cost         : {format_currency(summary['landed_cost'])}"
        f" ({format_currency_short(summary['landed_cost'])})"
    )
    print(f"Cost per sq mt      : {format_currency(summary['cost_per_sq_mt'])}")
    print(f"Cost per vaar       : {format_currency(summary['cost_per_vaar'])}")
    print(f"Cost per vigha      : {format_currency(summary['cost_per_vigha'])}")
    print(f"Landed cost (FP 60%): {format_currency(summary['fp_landed_cost'])}")
    print(f"Total payable       : {format_currency(summary['grand_total_payment'])}")
    print("-" * 72)


def print_schedule(schedule: Iterable[PaymentScheduleItem]) -> None:
    """Print the deal payment schedule as a simple table."""
    print("\t".join(["#", "Date", "Type", "Description", "Amount"]))
    for item in schedule:
        print(
            "\t".join(
                [
                    str(item.id),
                    format_date(item.date),
                    item.type.value,
                    item.description,
                    format_number(item.amount),
                ]
            )
        )


def print_timeline(schedule: Iterable[PaymentInstallment]) -> None:
    """Print a plot payment timeline with its paid/pending status."""
    print("\t".join(["#", "Due", "Label", "Expected", "Paid", "Status"]))
    for row in schedule:
        paid = format_number(row.paid_amount) if row.paid_amount is not None else "-"
        print(
            "\t".join(
                [
                    str(row.id),
                    format_date(row.due_date),
                    row.label,
                    format_number(row.expected_amount),
                    paid,
                    "Paid" if row.is_paid else "Pending",
                ]
            )
        )
