"""Plot-level aggregates for a subdivided project.

The weighted-average land rate is derived from every plot's
``(custom_land_rate, area_vaar)`` pair whenever the plot list changes. The
result is stored on the project as the default rate for plots added later;
it is never written back into existing plots.

The feasibility projection combines the plotting data with the saved land
deal: land cost, net saleable area after deductions, cost per square metre
and the profit at an expected sales rate.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Optional
from uuid import uuid4

from .data_models import FeasibilityReport, PlotSale, PlottingState, ProjectSavedState
from .engine import compute_deal
from .utils import CONVERSION_RATES, SQ_MT_PER_VIGHA, convert_area, round_half_up


def weighted_average_rate(plots: Iterable[PlotSale]) -> Decimal:
    """Return ``Σ(rate × area) / Σ area`` rounded to two decimals.

    Plots without a custom rate count with a rate of zero. Returns zero when
    the total area is zero.
    """
    weighted = Decimal("0")
    total_area = Decimal("0")
    for plot in plots:
        rate = plot.custom_land_rate or Decimal("0")
        weighted += rate * plot.area_vaar
        total_area += plot.area_vaar
    if total_area == 0:
        return Decimal("0.00")
    return round_half_up(weighted / total_area, 2)


def refresh_average_rate(state: PlottingState) -> PlottingState:
    return replace(state, current_average_rate=weighted_average_rate(state.plot_sales))


def new_plot_sale(
    state: PlottingState,
    plot_number: int,
    area_vaar: Decimal,
    customer_name: str = "",
    phone_number: str = "",
    custom_land_rate: Optional[Decimal] = None,
) -> PlottingState:
    """Add a plot to the project and refresh the average rate.

    The plot's land rate defaults to the project's current average rate.
    """
    plot = PlotSale(
        id=uuid4().hex,
        plot_number=plot_number,
        area_vaar=area_vaar,
        customer_name=customer_name,
        phone_number=phone_number,
        custom_land_rate=state.current_average_rate if custom_land_rate is None else custom_land_rate,
    )
    return refresh_average_rate(replace(state, plot_sales=state.plot_sales + [plot]))


def find_plot(state: PlottingState, plot_id: str) -> PlotSale:
    for plot in state.plot_sales:
        if plot.id == plot_id:
            return plot
    raise KeyError(plot_id)


def replace_plot(state: PlottingState, plot: PlotSale) -> PlottingState:
    plots = [plot if p.id == plot.id else p for p in state.plot_sales]
    return replace(state, plot_sales=plots)


def plot_net_total(plot: PlotSale, state: PlottingState) -> Decimal:
    """Return the sale value of a plot: area × (land rate + development rate)."""
    land_rate = state.land_rate if plot.custom_land_rate is None else plot.custom_land_rate
    return plot.area_vaar * (land_rate + state.dev_rate)


def total_development_expense(state: PlottingState) -> Decimal:
    return sum((e.amount for e in state.development_expenses), Decimal("0"))


def search_plots(plots: Iterable[PlotSale], query: str) -> List[PlotSale]:
    """Filter plots by customer name, plot number or phone number."""
    q = (query or "").strip().lower()
    if not q:
        return list(plots)
    return [
        p
        for p in plots
        if q in p.customer_name.lower() or q in str(p.plot_number) or q in p.phone_number
    ]


def _ratio(amount: Decimal, area: Decimal) -> Decimal:
    return amount / area if area > 0 else Decimal("0")


def with_development_cost(saved: ProjectSavedState, state: PlottingState) -> ProjectSavedState:
    """Return the saved deal with its development cost set to the plotting expenses."""
    overheads = replace(saved.overheads, development_cost=total_development_expense(state))
    return replace(saved, overheads=overheads)


def feasibility(state: PlottingState, saved: ProjectSavedState) -> FeasibilityReport:
    """Project the cost and profit of selling the plotted land.

    The land cost is the deal's landed cost on its cost-sheet basis without
    the development cost stored on the deal; the plotting development
    expenses take its place.
    """
    if state.sales_rate_unit not in CONVERSION_RATES:
        raise ValueError(f"Unknown area unit: {state.sales_rate_unit}")
    result = compute_deal(saved.identity, saved.measurements, saved.financials, saved.overheads)
    land_cost = result.landed_cost_for_basis(saved.cost_sheet_basis) - saved.overheads.development_cost

    area = saved.measurements.area_sq_mt
    net_saleable = area * (1 - state.deduction_percent / Decimal(100))
    dev_total = total_development_expense(state)
    project_cost = land_cost + dev_total
    finished = _ratio(project_cost, net_saleable)

    revenue = convert_area(net_saleable, "SqMeter", state.sales_rate_unit) * state.expected_sales_rate
    profit = revenue - project_cost
    return FeasibilityReport(
        total_area_sq_mt=area,
        net_saleable_sq_mt=net_saleable,
        landed_cost_without_dev=land_cost,
        total_development_expense=dev_total,
        total_project_cost=project_cost,
        raw_cost_per_sq_mt=_ratio(land_cost, area),
        loaded_cost_per_sq_mt=_ratio(land_cost, net_saleable),
        finished_cost_per_sq_mt=finished,
        finished_cost_per_sales_unit=finished * (SQ_MT_PER_VIGHA / CONVERSION_RATES[state.sales_rate_unit]),
        projected_revenue=revenue,
        net_profit=profit,
        roi_percent=profit / project_cost * 100 if project_cost > 0 else Decimal("0"),
    )
