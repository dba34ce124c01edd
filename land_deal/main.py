"""Command-line interface for the land deal planner.

This module uses the ``click`` library to implement a multi-command
interface. Users can structure a land deal (cost sheet plus payment
schedule), view only the cost summary, or build the payment timeline for a
plot. Results can be printed to the terminal or exported to JSON/CSV/PDF
files.
"""

from __future__ import annotations

import csv
import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from .data_models import (
    CalculationResult,
    DownPaymentRule,
    DownPaymentType,
    Duration,
    DurationUnit,
    Financials,
    LandIdentity,
    Measurements,
    Overheads,
    PaymentScheduleItem,
    StampDutyType,
)
from .engine import compute_deal, deal_price_from_rate, summarize
from .formatter import print_schedule, print_summary, print_timeline
from .reports import PdfOptions, build_deal_report
from .serializers import installment_to_dict, result_to_dict
from .timeline import build_timeline
from .utils import CONVERSION_RATES, decimal_from_str, parse_iso_date, parse_optional_number

AMOUNT_SUFFIXES = {
    "cr": Decimal("10000000"),
    "l": Decimal("100000"),
    "k": Decimal("1000"),
}


def parse_amount(value: Optional[str]) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000", "5,00,000") and shorthand with ``k``,
    ``l`` (lakh) or ``cr`` (crore) suffixes, e.g. "2.5cr". A missing value
    is zero.
    """
    if value is None or not value.strip():
        return Decimal("0")
    cleaned = value.strip().lower().replace(",", "")
    factor = Decimal("1")
    for suffix, multiplier in AMOUNT_SUFFIXES.items():
        if cleaned.endswith(suffix):
            factor = multiplier
            cleaned = cleaned[: -len(suffix)]
            break
    try:
        amount = decimal_from_str(cleaned)
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")
    if not amount.is_finite():
        raise click.BadParameter(f"Invalid amount: {value}")
    return amount * factor


def parse_date_option(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return parse_iso_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def build_deal_from_options(
    area: str,
    unit: str,
    jantri_rate: str,
    deal_price: Optional[str],
    price_per_vigha: Optional[str],
    down_payment_percent: str,
    installments: int,
    purchase_date: Optional[str],
    stamp_duty_type: str,
    stamp_duty_percent: str,
    architect_fees: Optional[str] = None,
    plan_pass_fees: Optional[str] = None,
    na_expense: Optional[str] = None,
    na_premium: Optional[str] = None,
    development_cost: Optional[str] = None,
    village: str = "",
    tp_scheme: str = "",
    fp_number: str = "",
    survey_number: str = "",
) -> Tuple[LandIdentity, Measurements, Financials, Overheads]:
    measurements = Measurements.from_input(parse_amount(area), unit, parse_amount(jantri_rate))
    # An explicit deal price wins over a per-vigha rate.
    if deal_price:
        total_price = parse_amount(deal_price)
    else:
        total_price = deal_price_from_rate(parse_amount(price_per_vigha), measurements.area_sq_mt)
    financials = Financials(
        total_deal_price=total_price,
        down_payment_percent=parse_optional_number(down_payment_percent),
        number_of_installments=installments,
        purchase_date=parse_date_option(purchase_date),
    )
    overheads = Overheads(
        stamp_duty_type=StampDutyType(stamp_duty_type),
        stamp_duty_percent=parse_optional_number(stamp_duty_percent),
        architect_fees=parse_amount(architect_fees),
        plan_pass_fees=parse_amount(plan_pass_fees),
        na_expense=parse_amount(na_expense),
        na_premium=parse_amount(na_premium),
        development_cost=parse_amount(development_cost),
    )
    identity = LandIdentity(
        village=village,
        tp_scheme=tp_scheme,
        fp_number=fp_number,
        block_survey_number=survey_number,
    )
    return identity, measurements, financials, overheads


def export_to_json(path: Path, result: CalculationResult) -> None:
    """Export schedule and summary to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2)


def export_to_csv(path: Path, schedule: List[PaymentScheduleItem]) -> None:
    """Export schedule to a CSV file."""
    header = ["Id", "Date", "Type", "Description", "Amount"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for item in schedule:
            writer.writerow(
                [
                    item.id,
                    item.date.isoformat(),
                    item.type.value,
                    item.description,
                    float(item.amount),
                ]
            )


_DEAL_OPTIONS = [
    click.option("--area", "-a", "area", required=True, help="Land area in the chosen unit"),
    click.option("--unit", "unit", type=click.Choice(sorted(CONVERSION_RATES)), default="SqMeter", help="Unit of --area"),
    click.option("--jantri-rate", "-j", "jantri_rate", default="0", help="Jantri rate per sq mt"),
    click.option("--deal-price", "-p", "deal_price", help="Total deal price (e.g. 2.5cr)"),
    click.option("--price-per-vigha", "price_per_vigha", help="Asking price per vigha, used when --deal-price is omitted"),
    click.option("--down-payment", "-d", "down_payment_percent", default="0", help="Down payment percent of the deal price"),
    click.option("--installments", "-n", "installments", type=click.IntRange(min=0), default=0, help="Number of monthly installments"),
    click.option("--purchase-date", "-s", "purchase_date", help="Purchase date (YYYY-MM-DD), defaults to today"),
    click.option(
        "--stamp-duty-type",
        "stamp_duty_type",
        type=click.Choice([t.value for t in StampDutyType]),
        default=StampDutyType.JANTRI.value,
        help="Value stamp duty is charged on",
    ),
    click.option("--stamp-duty", "stamp_duty_percent", default="4.9", help="Stamp duty percent"),
    click.option("--architect-fees", "architect_fees", help="Architect fees"),
    click.option("--plan-pass-fees", "plan_pass_fees", help="Plan pass fees"),
    click.option("--na-expense", "na_expense", help="NA conversion expense"),
    click.option("--na-premium", "na_premium", help="NA premium"),
    click.option("--development-cost", "development_cost", help="Development cost"),
    click.option("--village", "village", default="", help="Village name"),
    click.option("--tp-scheme", "tp_scheme", default="", help="TP scheme number"),
    click.option("--fp-number", "fp_number", default="", help="Final plot number"),
    click.option("--survey-number", "survey_number", default="", help="Block / survey number"),
]


def deal_options(func):
    for option in reversed(_DEAL_OPTIONS):
        func = option(func)
    return func


@click.group()
def cli() -> None:
    """A command-line planner for land acquisition deals and plot sales."""
    pass


@cli.command()
@deal_options
@click.option("--basis", "basis", type=click.Choice(["100", "60"]), default="100", help="Cost sheet basis for PDF export")
@click.option("--output", "output", type=str, help="Output file path (.json, .csv or .pdf)")
def deal(output: Optional[str], basis: str, **options: Any) -> None:
    """Compute and print the cost sheet and payment schedule of a deal."""
    identity, measurements, financials, overheads = build_deal_from_options(**options)
    result = compute_deal(identity, measurements, financials, overheads)
    if output:
        path = Path(output)
        suffix = path.suffix.lower()
        if suffix == ".json":
            export_to_json(path, result)
        elif suffix == ".csv":
            export_to_csv(path, result.schedule)
        elif suffix == ".pdf":
            path.write_bytes(build_deal_report(identity, result, PdfOptions(), basis=basis))
        else:
            raise click.BadParameter("Unsupported output format; use .json, .csv or .pdf")
        click.echo(f"Deal exported to {path}")
    else:
        print_summary(summarize(result))
        print_schedule(result.schedule)


@cli.command()
@deal_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(output: Optional[str], **options: Any) -> None:
    """Compute and print only the cost sheet of a deal."""
    result = compute_deal(*build_deal_from_options(**options))
    summary_data: Dict[str, Any] = summarize(result)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command()
@click.option("--net-total", "-t", "net_total", required=True, help="Net sale value of the plot")
@click.option("--dp", "dp_amount", default="0", help="Down payment (percent or amount, see --dp-type)")
@click.option("--dp-type", "dp_type", type=click.Choice([t.value for t in DownPaymentType]), default="percent")
@click.option("--dp-window", "dp_window", default="0", help="Time until the down payment is due")
@click.option("--dp-unit", "dp_unit", type=click.Choice([u.value for u in DurationUnit]), default="Months")
@click.option("--total-window", "total_window", default="0", help="Total duration of the deal")
@click.option("--total-unit", "total_unit", type=click.Choice([u.value for u in DurationUnit]), default="Months")
@click.option("--installments", "-n", "installments", default="0", help="Number of installments (may be fractional)")
@click.option("--start-date", "-s", "start_date", help="Deal date (YYYY-MM-DD), defaults to today")
@click.option("--output", "output", type=str, help="Output file path (.json)")
def timeline(
    net_total: str,
    dp_amount: str,
    dp_type: str,
    dp_window: str,
    dp_unit: str,
    total_window: str,
    total_unit: str,
    installments: str,
    start_date: Optional[str],
    output: Optional[str],
) -> None:
    """Build and print the payment timeline of a plot."""
    try:
        schedule = build_timeline(
            parse_amount(net_total),
            DownPaymentRule(type=DownPaymentType(dp_type), amount=parse_amount(dp_amount)),
            Duration(parse_optional_number(dp_window), DurationUnit(dp_unit)),
            Duration(parse_optional_number(total_window), DurationUnit(total_unit)),
            parse_optional_number(installments),
            parse_date_option(start_date),
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Timeline export must use .json extension")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"schedule": [installment_to_dict(r) for r in schedule]}, f, indent=2)
        click.echo(f"Timeline exported to {path}")
    else:
        print_timeline(schedule)


if __name__ == "__main__":
    cli()
