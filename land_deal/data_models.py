"""Data models for the land deal planner.

This module defines dataclasses representing the entities used by the
calculators: the land being acquired (identity, measurements, financials and
overheads), the resulting payment schedule and cost sheet, and the per-plot
deal state tracked once the land has been subdivided and plots are sold.
Using dataclasses makes it easy to construct, inspect and serialize these
structures.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from .utils import CONVERSION_RATES, add_duration, convert_area


class StampDutyType(str, Enum):
    DEAL_PRICE = "DealPrice"
    JANTRI = "Jantri"


class ScheduleItemType(str, Enum):
    TOKEN = "Token"
    INSTALLMENT = "Installment"
    JANTRI = "Jantri"
    TOTAL = "Total"


class DurationUnit(str, Enum):
    DAYS = "Days"
    MONTHS = "Months"


class DownPaymentType(str, Enum):
    PERCENT = "percent"
    VALUE = "value"


@dataclass
class LandIdentity:
    """Descriptive fields for a land parcel. Display only."""

    village: str = ""
    tp_scheme: str = ""
    fp_number: str = ""
    block_survey_number: str = ""


@dataclass
class Measurements:
    """Area and government (jantri) rate of the land.

    Attributes
    ----------
    area_sq_mt: Decimal
        Total land area in square metres.
    jantri_rate: Decimal
        Government guideline rate per square metre.
    input_area / input_unit:
        The area as the user typed it, kept so a saved project can be shown
        in its original unit.
    """

    area_sq_mt: Decimal
    jantri_rate: Decimal
    input_area: Optional[Decimal] = None
    input_unit: str = "SqMeter"

    @classmethod
    def from_input(cls, area: Decimal, unit: str, jantri_rate: Decimal) -> "Measurements":
        if unit not in CONVERSION_RATES:
            raise ValueError(f"Unknown area unit: {unit}")
        return cls(
            area_sq_mt=convert_area(area, unit, "SqMeter"),
            jantri_rate=jantri_rate,
            input_area=area,
            input_unit=unit,
        )


@dataclass
class Financials:
    total_deal_price: Decimal
    down_payment_percent: Decimal
    number_of_installments: int
    purchase_date: date


@dataclass
class CustomExpense:
    name: str
    amount: Decimal


@dataclass
class Overheads:
    """Stamp duty settings and flat acquisition expenses."""

    stamp_duty_type: StampDutyType = StampDutyType.JANTRI
    stamp_duty_percent: Decimal = Decimal("0")
    architect_fees: Decimal = Decimal("0")
    plan_pass_fees: Decimal = Decimal("0")
    na_expense: Decimal = Decimal("0")
    na_premium: Decimal = Decimal("0")
    development_cost: Decimal = Decimal("0")
    custom_expenses: List[CustomExpense] = field(default_factory=list)

    def total(self) -> Decimal:
        flat = (
            self.architect_fees
            + self.plan_pass_fees
            + self.na_expense
            + self.na_premium
            + self.development_cost
        )
        return flat + sum((e.amount for e in self.custom_expenses), Decimal("0"))


@dataclass
class PaymentScheduleItem:
    """One row of the land deal payment schedule."""

    id: int
    date: date
    description: str
    amount: Decimal
    type: ScheduleItemType


@dataclass
class CalculationResult:
    """Derived cost sheet and payment schedule for a land deal.

    The whole result is recomputed from the inputs on every change and is
    never patched in place. ``grand_total_payment`` always equals the sum of
    the schedule amounts.
    """

    area_sq_mt: Decimal
    vigha_equivalent: Decimal
    total_jantri_value: Decimal
    stamp_duty: Decimal
    down_payment: Decimal
    installment_amount: Decimal
    total_additional_expenses: Decimal
    landed_cost: Decimal
    cost_per_sq_mt: Decimal
    cost_per_vaar: Decimal
    cost_per_vigha: Decimal
    schedule: List[PaymentScheduleItem]
    grand_total_payment: Decimal

    # Final-plot (60 %) basis
    fp_area_sq_mt: Decimal
    fp_jantri_value: Decimal
    fp_stamp_duty: Decimal
    fp_landed_cost: Decimal
    fp_cost_per_sq_mt: Decimal
    fp_cost_per_vaar: Decimal
    fp_cost_per_vigha: Decimal

    def landed_cost_for_basis(self, basis: str) -> Decimal:
        if basis == "100":
            return self.landed_cost
        if basis == "60":
            return self.fp_landed_cost
        raise ValueError(f"Unknown cost sheet basis: {basis}")


@dataclass
class Duration:
    value: Decimal
    unit: DurationUnit = DurationUnit.MONTHS


@dataclass
class DownPaymentRule:
    """How the down payment of a plot deal is derived.

    For ``DownPaymentType.PERCENT`` the ``amount`` is a percentage of the
    plot's net value; for ``DownPaymentType.VALUE`` it is a flat amount.
    """

    type: DownPaymentType
    amount: Decimal


@dataclass
class PaymentInstallment:
    """A row of a plot's payment timeline.

    While ``is_paid`` is False ``expected_amount`` is never negative. Once a
    row is paid its ``expected_amount`` and ``paid_amount`` are frozen.
    """

    id: int
    label: str
    due_date: date
    expected_amount: Decimal
    paid_amount: Optional[Decimal] = None
    is_paid: bool = False
    payment_date: Optional[date] = None
    payment_mode: Optional[str] = None
    bank_name: Optional[str] = None
    ref_number: Optional[str] = None
    remarks: Optional[str] = None
    is_interim: bool = False


@dataclass
class PaymentInput:
    """Details entered by the user when confirming a payment.

    A ``paid_amount`` of None means the expected amount was paid in full.
    """

    paid_amount: Optional[Decimal] = None
    payment_date: Optional[date] = None
    payment_mode: Optional[str] = None
    bank_name: Optional[str] = None
    ref_number: Optional[str] = None
    remarks: Optional[str] = None


@dataclass
class PlotDealState:
    start_date: date
    dp_amount: Decimal = Decimal("0")
    dp_type: DownPaymentType = DownPaymentType.PERCENT
    dp_duration: Duration = field(default_factory=lambda: Duration(Decimal("0")))
    total_duration: Duration = field(default_factory=lambda: Duration(Decimal("0")))
    num_installments: Decimal = Decimal("0")  # may be fractional
    agent_name: str = ""
    agent_commission: Decimal = Decimal("0")
    schedule: List[PaymentInstallment] = field(default_factory=list)

    @property
    def dp_rule(self) -> DownPaymentRule:
        return DownPaymentRule(type=self.dp_type, amount=self.dp_amount)

    @property
    def end_date(self) -> date:
        return add_duration(self.start_date, self.total_duration.value, self.total_duration.unit.value)


@dataclass
class PlotSale:
    """A plot in the subdivided project and, once booked, its deal."""

    id: str
    plot_number: int
    area_vaar: Decimal
    customer_name: str = ""
    phone_number: str = ""
    booking_date: Optional[date] = None
    custom_land_rate: Optional[Decimal] = None
    deal: Optional[PlotDealState] = None


@dataclass
class DevelopmentExpense:
    id: str
    description: str
    amount: Decimal


@dataclass
class PlottingState:
    """Plotting data of a project (persisted as the ``plotting_data`` blob)."""

    land_rate: Decimal = Decimal("0")
    dev_rate: Decimal = Decimal("0")
    development_expenses: List[DevelopmentExpense] = field(default_factory=list)
    plot_sales: List[PlotSale] = field(default_factory=list)
    total_plots: int = 0
    # Weighted average of the plots' land rates, used as the default rate
    # for newly added plots.
    current_average_rate: Decimal = Decimal("0")
    # Share of the gross area lost to roads and common plots.
    deduction_percent: Decimal = Decimal("40")
    expected_sales_rate: Decimal = Decimal("0")
    sales_rate_unit: str = "SqMeter"


@dataclass
class FeasibilityReport:
    """Cost and profit projection of a plotted project.

    Attributes
    ----------
    landed_cost_without_dev: Decimal
        Landed cost of the land on the project's cost-sheet basis, excluding
        any development cost.
    total_project_cost: Decimal
        ``landed_cost_without_dev`` plus the development expenses.
    raw_cost_per_sq_mt / loaded_cost_per_sq_mt / finished_cost_per_sq_mt:
        Acquisition cost over the gross area, acquisition cost over the net
        saleable area, and total project cost over the net saleable area.
    finished_cost_per_sales_unit: Decimal
        ``finished_cost_per_sq_mt`` expressed per unit of the sales rate.
    """

    total_area_sq_mt: Decimal
    net_saleable_sq_mt: Decimal
    landed_cost_without_dev: Decimal
    total_development_expense: Decimal
    total_project_cost: Decimal
    raw_cost_per_sq_mt: Decimal
    loaded_cost_per_sq_mt: Decimal
    finished_cost_per_sq_mt: Decimal
    finished_cost_per_sales_unit: Decimal
    projected_revenue: Decimal
    net_profit: Decimal
    roi_percent: Decimal



@dataclass
class ProjectSavedState:
    """Everything needed to reopen a deal (persisted as ``full_data``)."""

    identity: LandIdentity
    measurements: Measurements
    financials: Financials
    overheads: Overheads
    analysis_unit: str = "Vigha"
    cost_sheet_basis: str = "100"
