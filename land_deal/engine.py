"""Core calculation engine for land acquisition deals.

This module implements the deal scheduler: given the identity, measurements,
financial terms and overheads of a land parcel it derives the stamp duty,
down payment and per-installment amount, a dated payment schedule and the
landed-cost metrics of the deal. The function is a pure transform of its
inputs; the caller recomputes the whole ``CalculationResult`` whenever any
input changes.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal, getcontext
from typing import List

from .data_models import (
    CalculationResult,
    Financials,
    LandIdentity,
    Measurements,
    Overheads,
    PaymentScheduleItem,
    ScheduleItemType,
    StampDutyType,
)
from .utils import CONVERSION_RATES, add_months, vigha_equivalent

getcontext().prec = 28  # increase precision for financial calculations

FIRST_INSTALLMENT_OFFSET = timedelta(days=90)
FP_AREA_SHARE = Decimal("0.60")

TOKEN_ROW_ID = 1
JANTRI_ROW_ID = 999


def _per_unit(amount: Decimal, area: Decimal) -> Decimal:
    # A zero area divides by 1 instead of raising.
    return amount / max(area, Decimal("1"))


def deal_price_from_rate(price_per_vigha: Decimal, area_sq_mt: Decimal) -> Decimal:
    """Return the total deal price for a per-Vigha asking rate."""
    return price_per_vigha * vigha_equivalent(area_sq_mt)


def _build_schedule(
    financials: Financials,
    down_payment: Decimal,
    installment_amount: Decimal,
    total_jantri_value: Decimal,
) -> List[PaymentScheduleItem]:
    """Return the ordered payment schedule.

    Order is Token, installments in date order, then the Jantri row. The
    first installment is due 90 days after purchase and every later one a
    calendar month after the previous.
    """
    schedule: List[PaymentScheduleItem] = []
    deal_price = financials.total_deal_price
    purchase_date = financials.purchase_date

    if deal_price > 0 or down_payment > 0:
        schedule.append(
            PaymentScheduleItem(
                id=TOKEN_ROW_ID,
                date=purchase_date,
                description="Token / Down Payment",
                amount=down_payment,
                type=ScheduleItemType.TOKEN,
            )
        )

    due_date = purchase_date + FIRST_INSTALLMENT_OFFSET
    for i in range(1, financials.number_of_installments + 1):
        schedule.append(
            PaymentScheduleItem(
                id=i + 1,
                date=due_date,
                description=f"Installment {i}",
                amount=installment_amount,
                type=ScheduleItemType.INSTALLMENT,
            )
        )
        due_date = add_months(due_date, 1)

    # ``due_date`` now holds the slot after the last installment.
    if total_jantri_value > 0:
        schedule.append(
            PaymentScheduleItem(
                id=JANTRI_ROW_ID,
                date=due_date,
                description="Jantri Payment",
                amount=total_jantri_value,
                type=ScheduleItemType.JANTRI,
            )
        )
    return schedule


def compute_deal(
    identity: LandIdentity,
    measurements: Measurements,
    financials: Financials,
    overheads: Overheads,
) -> CalculationResult:
    """Compute the payment schedule and cost sheet for a land deal.

    Parameters
    ----------
    identity: LandIdentity
        Descriptive fields; they do not influence any number.
    measurements: Measurements
        Area in square metres and the jantri rate per square metre.
    financials: Financials
        Deal price, down payment percentage, installment count and purchase
        date. Numeric fields must already be coerced (blank means zero).
    overheads: Overheads
        Stamp duty base and percentage plus flat acquisition expenses.

    Returns
    -------
    CalculationResult
        The schedule and every derived aggregate. The installment pool is not
        clamped, so installments can be negative when the down payment plus
        the jantri value exceed the deal price.
    """
    area = measurements.area_sq_mt
    deal_price = financials.total_deal_price

    total_jantri_value = area * measurements.jantri_rate

    stamp_percent = overheads.stamp_duty_percent / Decimal(100)
    if overheads.stamp_duty_type == StampDutyType.DEAL_PRICE:
        stamp_duty = deal_price * stamp_percent
    else:
        stamp_duty = total_jantri_value * stamp_percent

    down_payment = deal_price * financials.down_payment_percent / Decimal(100)

    installment_pool = deal_price - down_payment - total_jantri_value
    if financials.number_of_installments > 0:
        installment_amount = installment_pool / Decimal(financials.number_of_installments)
    else:
        installment_amount = Decimal("0")

    schedule = _build_schedule(financials, down_payment, installment_amount, total_jantri_value)
    grand_total_payment = sum((item.amount for item in schedule), Decimal("0"))

    additional = overheads.total()
    landed_cost = deal_price + stamp_duty + additional

    in_vigha = vigha_equivalent(area)
    in_vaar = in_vigha * CONVERSION_RATES["Vaar"]

    # Final-plot basis: only 60 % of the land comes back as saleable plots.
    fp_area = area * FP_AREA_SHARE
    fp_jantri_value = fp_area * measurements.jantri_rate
    if overheads.stamp_duty_type == StampDutyType.JANTRI:
        fp_stamp_duty = fp_jantri_value * stamp_percent
    else:
        fp_stamp_duty = stamp_duty
    fp_landed_cost = deal_price + fp_stamp_duty + additional

    return CalculationResult(
        area_sq_mt=area,
        vigha_equivalent=in_vigha,
        total_jantri_value=total_jantri_value,
        stamp_duty=stamp_duty,
        down_payment=down_payment,
        installment_amount=installment_amount,
        total_additional_expenses=additional,
        landed_cost=landed_cost,
        cost_per_sq_mt=_per_unit(landed_cost, area),
        cost_per_vaar=_per_unit(landed_cost, in_vaar),
        cost_per_vigha=_per_unit(landed_cost, in_vigha),
        schedule=schedule,
        grand_total_payment=grand_total_payment,
        fp_area_sq_mt=fp_area,
        fp_jantri_value=fp_jantri_value,
        fp_stamp_duty=fp_stamp_duty,
        fp_landed_cost=fp_landed_cost,
        fp_cost_per_sq_mt=_per_unit(fp_landed_cost, fp_area),
        fp_cost_per_vaar=_per_unit(fp_landed_cost, in_vaar * FP_AREA_SHARE),
        fp_cost_per_vigha=_per_unit(fp_landed_cost, in_vigha * FP_AREA_SHARE),
    )


def summarize(result: CalculationResult) -> dict:
    """Return the aggregate metrics of a deal as a flat dictionary."""
    return {
        "area_sq_mt": float(result.area_sq_mt),
        "vigha_equivalent": float(result.vigha_equivalent),
        "total_jantri_value": float(result.total_jantri_value),
        "stamp_duty": float(result.stamp_duty),
        "down_payment": float(result.down_payment),
        "installment_amount": float(result.installment_amount),
        "total_additional_expenses": float(result.total_additional_expenses),
        "landed_cost": float(result.landed_cost),
        "cost_per_sq_mt": float(result.cost_per_sq_mt),
        "cost_per_vaar": float(result.cost_per_vaar),
        "cost_per_vigha": float(result.cost_per_vigha),
        "grand_total_payment": float(result.grand_total_payment),
        "fp_area_sq_mt": float(result.fp_area_sq_mt),
        "fp_jantri_value": float(result.fp_jantri_value),
        "fp_stamp_duty": float(result.fp_stamp_duty),
        "fp_landed_cost": float(result.fp_landed_cost),
        "fp_cost_per_sq_mt": float(result.fp_cost_per_sq_mt),
        "fp_cost_per_vaar": float(result.fp_cost_per_vaar),
        "fp_cost_per_vigha": float(result.fp_cost_per_vigha),
        "payments": len(result.schedule),
    }
