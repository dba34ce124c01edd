"""Conversion between the data models and JSON-compatible dictionaries.

Dictionaries use the camelCase keys of the persisted ``full_data`` and
``plotting_data`` blobs. Reading is lenient: every numeric field goes
through ``parse_optional_number`` so blank or malformed values become zero,
while dates must be valid ISO strings (blank dates fall back to a default).
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from .data_models import (
    CalculationResult,
    CustomExpense,
    DevelopmentExpense,
    DownPaymentType,
    Duration,
    DurationUnit,
    FeasibilityReport,
    Financials,
    LandIdentity,
    Measurements,
    Overheads,
    PaymentInput,
    PaymentInstallment,
    PlotDealState,
    PlotSale,
    PlottingState,
    ProjectSavedState,
    StampDutyType,
)
from .engine import summarize
from .utils import CONVERSION_RATES, parse_iso_date, parse_optional_number

num = parse_optional_number


def _date(value: Optional[str], default: Optional[date] = None) -> Optional[date]:
    if value is None or str(value).strip() == "":
        return default
    return parse_iso_date(str(value))


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _optional_number(value: Any) -> Optional[Decimal]:
    if value is None or str(value).strip() == "":
        return None
    return num(value)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


# --- Land deal -------------------------------------------------------------


def identity_from_dict(data: Dict[str, Any]) -> LandIdentity:
    return LandIdentity(
        village=_text(data.get("village")),
        tp_scheme=_text(data.get("tpScheme")),
        fp_number=_text(data.get("fpNumber")),
        block_survey_number=_text(data.get("blockSurveyNumber")),
    )


def identity_to_dict(identity: LandIdentity) -> Dict[str, Any]:
    return {
        "village": identity.village,
        "tpScheme": identity.tp_scheme,
        "fpNumber": identity.fp_number,
        "blockSurveyNumber": identity.block_survey_number,
    }


def measurements_from_dict(data: Dict[str, Any]) -> Measurements:
    """Read measurements either as ``areaSqMt`` or as ``areaInput`` + ``inputUnit``."""
    jantri_rate = num(data.get("jantriRate"))
    if data.get("areaInput") not in (None, ""):
        return Measurements.from_input(num(data.get("areaInput")), data.get("inputUnit") or "SqMeter", jantri_rate)
    return Measurements(area_sq_mt=num(data.get("areaSqMt")), jantri_rate=jantri_rate)


def measurements_to_dict(m: Measurements) -> Dict[str, Any]:
    return {
        "areaSqMt": float(m.area_sq_mt),
        "jantriRate": float(m.jantri_rate),
        "areaInput": float(m.input_area) if m.input_area is not None else None,
        "inputUnit": m.input_unit,
    }


def financials_from_dict(data: Dict[str, Any]) -> Financials:
    return Financials(
        total_deal_price=num(data.get("totalDealPrice")),
        down_payment_percent=num(data.get("downPaymentPercent")),
        number_of_installments=max(0, int(num(data.get("numberOfInstallments")))),
        purchase_date=_date(data.get("purchaseDate"), date.today()),
    )


def financials_to_dict(f: Financials) -> Dict[str, Any]:
    return {
        "totalDealPrice": float(f.total_deal_price),
        "downPaymentPercent": float(f.down_payment_percent),
        "numberOfInstallments": f.number_of_installments,
        "purchaseDate": _iso(f.purchase_date),
    }


def overheads_from_dict(data: Dict[str, Any]) -> Overheads:
    return Overheads(
        stamp_duty_type=StampDutyType(data.get("stampDutyType") or StampDutyType.JANTRI.value),
        stamp_duty_percent=num(data.get("stampDutyPercent")),
        architect_fees=num(data.get("architectFees")),
        plan_pass_fees=num(data.get("planPassFees")),
        na_expense=num(data.get("naExpense")),
        na_premium=num(data.get("naPremium")),
        development_cost=num(data.get("developmentCost")),
        custom_expenses=[
            CustomExpense(name=_text(e.get("name")), amount=num(e.get("amount")))
            for e in data.get("customExpenses") or []
        ],
    )


def overheads_to_dict(o: Overheads) -> Dict[str, Any]:
    return {
        "stampDutyType": o.stamp_duty_type.value,
        "stampDutyPercent": float(o.stamp_duty_percent),
        "architectFees": float(o.architect_fees),
        "planPassFees": float(o.plan_pass_fees),
        "naExpense": float(o.na_expense),
        "naPremium": float(o.na_premium),
        "developmentCost": float(o.development_cost),
        "customExpenses": [{"name": e.name, "amount": float(e.amount)} for e in o.custom_expenses],
    }


def deal_inputs_from_dict(
    data: Dict[str, Any],
) -> Tuple[LandIdentity, Measurements, Financials, Overheads]:
    """Split a raw deal payload into the four calculator inputs."""
    return (
        identity_from_dict(data.get("identity") or {}),
        measurements_from_dict(data.get("measurements") or {}),
        financials_from_dict(data.get("financials") or {}),
        overheads_from_dict(data.get("overheads") or {}),
    )


def saved_state_from_dict(data: Dict[str, Any]) -> ProjectSavedState:
    identity, measurements, financials, overheads = deal_inputs_from_dict(data)
    return ProjectSavedState(
        identity=identity,
        measurements=measurements,
        financials=financials,
        overheads=overheads,
        analysis_unit=data.get("analysisUnit") or "Vigha",
        cost_sheet_basis=str(data.get("costSheetBasis") or "100"),
    )


def saved_state_to_dict(state: ProjectSavedState) -> Dict[str, Any]:
    return {
        "identity": identity_to_dict(state.identity),
        "measurements": measurements_to_dict(state.measurements),
        "financials": financials_to_dict(state.financials),
        "overheads": overheads_to_dict(state.overheads),
        "analysisUnit": state.analysis_unit,
        "costSheetBasis": state.cost_sheet_basis,
    }


def result_to_dict(result: CalculationResult) -> Dict[str, Any]:
    return {
        "summary": summarize(result),
        "schedule": [
            {
                "id": item.id,
                "date": _iso(item.date),
                "description": item.description,
                "amount": float(item.amount),
                "type": item.type.value,
            }
            for item in result.schedule
        ],
    }


# --- Plot deals ------------------------------------------------------------


def duration_from_dict(data: Optional[Dict[str, Any]]) -> Duration:
    data = data or {}
    return Duration(value=num(data.get("value")), unit=DurationUnit(data.get("unit") or "Months"))


def duration_to_dict(d: Duration) -> Dict[str, Any]:
    return {"value": float(d.value), "unit": d.unit.value}


def installment_from_dict(data: Dict[str, Any]) -> PaymentInstallment:
    return PaymentInstallment(
        id=int(num(data.get("id"))),
        label=_text(data.get("label")),
        due_date=parse_iso_date(str(data.get("dueDate"))),
        expected_amount=num(data.get("expectedAmount")),
        paid_amount=_optional_number(data.get("paidAmount")),
        is_paid=bool(data.get("isPaid")),
        payment_date=_date(data.get("paymentDate")),
        payment_mode=data.get("paymentMode"),
        bank_name=data.get("bankName"),
        ref_number=data.get("refNumber"),
        remarks=data.get("remarks"),
        is_interim=bool(data.get("isInterim")),
    )


def installment_to_dict(row: PaymentInstallment) -> Dict[str, Any]:
    return {
        "id": row.id,
        "label": row.label,
        "dueDate": _iso(row.due_date),
        "expectedAmount": float(row.expected_amount),
        "paidAmount": float(row.paid_amount) if row.paid_amount is not None else None,
        "isPaid": row.is_paid,
        "paymentDate": _iso(row.payment_date),
        "paymentMode": row.payment_mode,
        "bankName": row.bank_name,
        "refNumber": row.ref_number,
        "remarks": row.remarks,
        "isInterim": row.is_interim,
    }


def schedule_from_list(rows: Optional[List[Dict[str, Any]]]) -> List[PaymentInstallment]:
    return [installment_from_dict(r) for r in rows or []]


def plot_deal_from_dict(data: Dict[str, Any]) -> PlotDealState:
    return PlotDealState(
        start_date=_date(data.get("startDate"), date.today()),
        dp_amount=num(data.get("dpAmount")),
        dp_type=DownPaymentType(data.get("dpType") or "percent"),
        dp_duration=duration_from_dict(data.get("dpDuration")),
        total_duration=duration_from_dict(data.get("totalDuration")),
        num_installments=num(data.get("numInstallments")),
        agent_name=_text(data.get("agentName")),
        agent_commission=num(data.get("agentCommission")),
        schedule=schedule_from_list(data.get("schedule")),
    )


def plot_deal_to_dict(deal: PlotDealState) -> Dict[str, Any]:
    return {
        "startDate": _iso(deal.start_date),
        "dpAmount": float(deal.dp_amount),
        "dpType": deal.dp_type.value,
        "dpDuration": duration_to_dict(deal.dp_duration),
        "totalDuration": duration_to_dict(deal.total_duration),
        "numInstallments": float(deal.num_installments),
        "agentName": deal.agent_name,
        "agentCommission": float(deal.agent_commission),
        "schedule": [installment_to_dict(r) for r in deal.schedule],
    }


def payment_input_from_dict(data: Dict[str, Any]) -> PaymentInput:
    return PaymentInput(
        paid_amount=_optional_number(data.get("paidAmount")),
        payment_date=_date(data.get("paymentDate")),
        payment_mode=data.get("paymentMode"),
        bank_name=data.get("bankName"),
        ref_number=data.get("refNumber"),
        remarks=data.get("remarks"),
    )


def plot_from_dict(data: Dict[str, Any]) -> PlotSale:
    deal = data.get("dealStructure")
    return PlotSale(
        id=_text(data.get("id")),
        plot_number=int(num(data.get("plotNumber"))),
        area_vaar=num(data.get("areaVaar")),
        customer_name=_text(data.get("customerName")),
        phone_number=_text(data.get("phoneNumber")),
        booking_date=_date(data.get("bookingDate")),
        custom_land_rate=_optional_number(data.get("customLandRate")),
        deal=plot_deal_from_dict(deal) if deal else None,
    )


def plot_to_dict(plot: PlotSale) -> Dict[str, Any]:
    return {
        "id": plot.id,
        "plotNumber": plot.plot_number,
        "areaVaar": float(plot.area_vaar),
        "customerName": plot.customer_name,
        "phoneNumber": plot.phone_number,
        "bookingDate": _iso(plot.booking_date),
        "customLandRate": float(plot.custom_land_rate) if plot.custom_land_rate is not None else None,
        "dealStructure": plot_deal_to_dict(plot.deal) if plot.deal else None,
    }


def plotting_from_dict(data: Optional[Dict[str, Any]]) -> PlottingState:
    data = data or {}
    sales_rate_unit = data.get("salesRateUnit") or "SqMeter"
    if sales_rate_unit not in CONVERSION_RATES:
        raise ValueError(f"Unknown area unit: {sales_rate_unit}")
    return PlottingState(
        land_rate=num(data.get("landRate")),
        dev_rate=num(data.get("devRate")),
        development_expenses=[
            DevelopmentExpense(id=_text(e.get("id")), description=_text(e.get("description")), amount=num(e.get("amount")))
            for e in data.get("developmentExpenses") or []
        ],
        plot_sales=[plot_from_dict(p) for p in data.get("plotSales") or []],
        total_plots=int(num(data.get("totalPlots"))),
        current_average_rate=num(data.get("currentAverageRate")),
        deduction_percent=num(data.get("deductionPercent", 40)),
        expected_sales_rate=num(data.get("expectedSalesRate")),
        sales_rate_unit=sales_rate_unit,
    )


def plotting_to_dict(state: PlottingState) -> Dict[str, Any]:
    return {
        "landRate": float(state.land_rate),
        "devRate": float(state.dev_rate),
        "developmentExpenses": [
            {"id": e.id, "description": e.description, "amount": float(e.amount)}
            for e in state.development_expenses
        ],
        "plotSales": [plot_to_dict(p) for p in state.plot_sales],
        "totalPlots": state.total_plots,
        "currentAverageRate": float(state.current_average_rate),
        "deductionPercent": float(state.deduction_percent),
        "expectedSalesRate": float(state.expected_sales_rate),
        "salesRateUnit": state.sales_rate_unit,
    }


def feasibility_to_dict(report: FeasibilityReport) -> Dict[str, Any]:
    return {
        "totalAreaSqMt": float(report.total_area_sq_mt),
        "netSaleableSqMt": float(report.net_saleable_sq_mt),
        "landedCostWithoutDev": float(report.landed_cost_without_dev),
        "totalDevelopmentExpense": float(report.total_development_expense),
        "totalProjectCost": float(report.total_project_cost),
        "rawCostPerSqMt": float(report.raw_cost_per_sq_mt),
        "loadedCostPerSqMt": float(report.loaded_cost_per_sq_mt),
        "finishedCostPerSqMt": float(report.finished_cost_per_sq_mt),
        "finishedCostPerSalesUnit": float(report.finished_cost_per_sales_unit),
        "projectedRevenue": float(report.projected_revenue),
        "netProfit": float(report.net_profit),
        "roiPercent": float(report.roi_percent),
    }
