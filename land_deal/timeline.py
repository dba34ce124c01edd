"""Payment timelines for individual plots.

A plot sold out of a subdivided project is paid for with a down payment
followed by installments spread evenly between the down payment due date and
the end of the deal. This module builds such timelines and implements the
edits a user makes while tracking payments: confirming a payment (with
shortfall or overage reallocation), undoing a confirmation, moving due dates
and adjusting amounts.

Every function here is a reducer: it receives the current schedule and
returns a new list, leaving the input rows untouched.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal, ROUND_CEILING
from typing import List, Optional

from .data_models import (
    DownPaymentRule,
    DownPaymentType,
    Duration,
    PaymentInput,
    PaymentInstallment,
    PlotDealState,
)
from .utils import add_duration, round_half_up

Schedule = List[PaymentInstallment]

EDITABLE_DETAILS = ("payment_mode", "bank_name", "ref_number", "remarks", "payment_date")


def down_payment_value(net_total: Decimal, rule: DownPaymentRule) -> Decimal:
    if rule.type == DownPaymentType.PERCENT:
        return round_half_up(net_total * rule.amount / Decimal(100))
    return rule.amount


def build_timeline(
    net_total: Decimal,
    dp_rule: DownPaymentRule,
    dp_window: Duration,
    total_window: Duration,
    num_installments: Decimal,
    start_date: date,
) -> Schedule:
    """Return a fresh payment timeline for a plot.

    The down payment is due ``dp_window`` after ``start_date`` and the deal
    ends ``total_window`` after it. ``num_installments`` may be fractional:
    the number of rows is rounded up while the per-row amount is
    ``round(balance / num_installments)``, and the last row takes whatever
    is left so the installments add up to the balance exactly. A down payment
    larger than ``net_total`` raises ``ValueError``.
    """
    dp_value = down_payment_value(net_total, dp_rule)
    balance = net_total - dp_value
    if balance < 0:
        raise ValueError(f"Down payment {dp_value} exceeds the net total {net_total}")
    dp_due = add_duration(start_date, dp_window.value, dp_window.unit.value)
    end_date = add_duration(start_date, total_window.value, total_window.unit.value)

    if dp_value == 0 and num_installments <= 0:
        return [
            PaymentInstallment(
                id=1,
                label="Full Payment",
                due_date=start_date,
                expected_amount=net_total,
            )
        ]

    schedule: Schedule = [
        PaymentInstallment(id=1, label="Down Payment", due_date=dp_due, expected_amount=dp_value)
    ]

    if num_installments > 0:
        count = int(num_installments.to_integral_value(rounding=ROUND_CEILING))
        span_days = max(0, (end_date - dp_due).days)
        installment = round_half_up(balance / num_installments)
        running_balance = balance
        for i in range(count):
            if i == count - 1:
                amount = running_balance
            else:
                amount = installment
                running_balance -= installment
            schedule.append(
                PaymentInstallment(
                    id=i + 2,
                    label=f"Installment {i + 1}",
                    due_date=dp_due + timedelta(days=span_days * (i + 1) // count),
                    expected_amount=amount,
                )
            )
    elif balance > 0:
        schedule.append(
            PaymentInstallment(id=2, label="Final Payment", due_date=end_date, expected_amount=balance)
        )
    return schedule


def build_deal_timeline(deal: PlotDealState, net_total: Decimal) -> PlotDealState:
    """Rebuild a deal's schedule from its own parameters.

    The previous schedule, including any recorded payments, is discarded.
    """
    schedule = build_timeline(
        net_total,
        deal.dp_rule,
        deal.dp_duration,
        deal.total_duration,
        deal.num_installments,
        deal.start_date,
    )
    return replace(deal, schedule=schedule)


def _copy(schedule: Schedule) -> Schedule:
    return [replace(row) for row in schedule]


def _check_index(schedule: Schedule, index: int) -> None:
    if not 0 <= index < len(schedule):
        raise ValueError(f"No payment row at index {index}")


def confirm_payment(
    schedule: Schedule,
    index: int,
    payment: PaymentInput,
    end_date: date,
) -> Schedule:
    """Mark a row as paid and reallocate any difference.

    A shortfall becomes a new "(Balance)" row right after the paid one, due
    on the deal's ``end_date``. An overage is taken off the following unpaid
    rows in order; a row is reduced at most to zero and is never removed.
    """
    _check_index(schedule, index)
    rows = _copy(schedule)
    current = rows[index]
    if current.is_paid:
        raise ValueError(f"{current.label} is already paid")

    actual_paid = current.expected_amount if payment.paid_amount is None else payment.paid_amount
    if actual_paid < 0:
        raise ValueError("Paid amount cannot be negative")

    rows[index] = replace(
        current,
        is_paid=True,
        paid_amount=actual_paid,
        payment_date=payment.payment_date,
        payment_mode=payment.payment_mode,
        bank_name=payment.bank_name,
        ref_number=payment.ref_number,
        remarks=payment.remarks,
    )

    remaining = current.expected_amount - actual_paid
    if remaining > 0:
        rows.insert(
            index + 1,
            PaymentInstallment(
                id=max(row.id for row in rows) + 1,
                label=f"{current.label} (Balance)",
                due_date=end_date,
                expected_amount=remaining,
                is_interim=True,
            ),
        )
    elif remaining < 0:
        excess = -remaining
        for j in range(index + 1, len(rows)):
            if excess <= 0:
                break
            row = rows[j]
            if row.is_paid:
                continue
            absorbed = min(excess, max(row.expected_amount, Decimal("0")))
            rows[j] = replace(row, expected_amount=row.expected_amount - absorbed)
            excess -= absorbed
    return rows


def undo_payment(schedule: Schedule, index: int) -> Schedule:
    """Flip a paid row back to pending.

    Balance rows inserted and amounts absorbed when the payment was
    confirmed are left as they are.
    """
    _check_index(schedule, index)
    rows = _copy(schedule)
    if not rows[index].is_paid:
        raise ValueError(f"{rows[index].label} is not paid")
    rows[index] = replace(rows[index], is_paid=False)
    return rows


def update_due_date(schedule: Schedule, index: int, due_date: date) -> Schedule:
    """Move a row to a new due date and re-sort the schedule by date."""
    _check_index(schedule, index)
    rows = _copy(schedule)
    rows[index] = replace(rows[index], due_date=due_date)
    return sorted(rows, key=lambda row: row.due_date)


def update_expected_amount(schedule: Schedule, index: int, amount: Decimal) -> Schedule:
    _check_index(schedule, index)
    row = schedule[index]
    if row.is_paid:
        raise ValueError(f"{row.label} is paid; its amount can no longer change")
    if amount < 0:
        raise ValueError("Expected amount cannot be negative")
    rows = _copy(schedule)
    rows[index] = replace(row, expected_amount=amount)
    return rows


def update_payment_details(schedule: Schedule, index: int, **details) -> Schedule:
    """Change the mode, bank, reference, remarks or date recorded on a row."""
    _check_index(schedule, index)
    unknown = set(details) - set(EDITABLE_DETAILS)
    if unknown:
        raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")
    rows = _copy(schedule)
    rows[index] = replace(rows[index], **details)
    return rows


def delete_row(schedule: Schedule, index: int) -> Schedule:
    _check_index(schedule, index)
    return _copy(schedule[:index] + schedule[index + 1 :])


def total_expected(schedule: Schedule) -> Decimal:
    return sum((row.expected_amount for row in schedule), Decimal("0"))


def total_received(schedule: Schedule) -> Decimal:
    return sum((row.paid_amount or Decimal("0") for row in schedule if row.is_paid), Decimal("0"))


def outstanding(schedule: Schedule) -> Decimal:
    return sum((row.expected_amount for row in schedule if not row.is_paid), Decimal("0"))


def deal_status(schedule: Optional[Schedule]) -> str:
    """Return "No Deal", "Deal Active" or "Deal Closed" for a plot."""
    if not schedule:
        return "No Deal"
    if all(row.is_paid for row in schedule):
        return "Deal Closed"
    return "Deal Active"
