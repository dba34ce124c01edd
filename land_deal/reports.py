"""PDF reports for land deals and plot payment timelines.

Reports are laid out with reportlab's platypus flowables and returned as raw
bytes so that the CLI can write them to disk and the web app can stream them
as a download.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import List, Optional, Tuple

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4, landscape, legal, letter, portrait
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .data_models import CalculationResult, LandIdentity, PlotDealState, PlotSale
from .formatter import format_date, format_number
from .timeline import deal_status, outstanding, total_expected, total_received

logger = logging.getLogger(__name__)

PAGE_SIZES = {"a4": A4, "letter": letter, "legal": legal}

HEADER_BLUE = colors.HexColor("#1e3a5f")
ACCENT_ORANGE = colors.HexColor("#ea580c")
PAID_GREEN = colors.HexColor("#dcfce7")


@dataclass
class PdfOptions:
    """Page setup for generated reports.

    ``margins`` are (top, left, bottom, right) in inches.
    """

    margins: Tuple[float, float, float, float] = (0.3, 0.3, 0.3, 0.3)
    page_size: str = "a4"
    orientation: str = "portrait"
    prefix: str = "GDK_NEXUS"

    def pagesize(self):
        try:
            size = PAGE_SIZES[self.page_size.lower()]
        except KeyError as exc:
            raise ValueError(f"Unsupported page size: {self.page_size}") from exc
        if self.orientation == "landscape":
            return landscape(size)
        if self.orientation == "portrait":
            return portrait(size)
        raise ValueError(f"Unsupported orientation: {self.orientation}")


def _money(amount) -> str:
    return f"Rs. {format_number(amount)}"


def deal_report_filename(identity: LandIdentity, prefix: str = "GDK_NEXUS") -> str:
    village = re.sub(r"\s+", "_", identity.village) if identity.village else "Village"
    fp_number = re.sub(r"\s+", "", identity.fp_number) if identity.fp_number else "FP"
    return f"{prefix}_{village}_FP{fp_number}.pdf"


def plot_report_filename(plot: PlotSale) -> str:
    customer = re.sub(r"\s+", "_", plot.customer_name) if plot.customer_name else "Customer"
    plot_number = plot.plot_number or "Plot"
    return f"Deal_{plot_number}_{customer}.pdf"


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name="ReportTitle",
        parent=styles["Heading1"],
        fontSize=18,
        spaceAfter=12,
        alignment=TA_CENTER,
        textColor=HEADER_BLUE,
    ))
    styles.add(ParagraphStyle(
        name="SectionHeading",
        parent=styles["Heading2"],
        fontSize=13,
        spaceBefore=14,
        spaceAfter=8,
        textColor=ACCENT_ORANGE,
    ))
    styles.add(ParagraphStyle(
        name="Footer",
        parent=styles["Normal"],
        fontSize=8,
        textColor=colors.grey,
        alignment=TA_CENTER,
    ))
    return styles


def _key_value_table(rows: List[List[str]]) -> Table:
    table = Table(rows, colWidths=[2.6 * inch, 3 * inch])
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTNAME", (1, 0), (1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("LINEBELOW", (0, -1), (-1, -1), 0.5, colors.grey),
    ]))
    return table


def _grid_table(header: List[str], body: List[List[str]], col_widths: List[float]) -> Table:
    table = Table([header] + body, colWidths=[w * inch for w in col_widths], repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_BLUE),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTNAME", (0, 1), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("ALIGN", (-1, 0), (-1, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f8fafc")]),
    ]))
    return table


def _render(elements: list, options: PdfOptions) -> bytes:
    top, left, bottom, right = options.margins
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=options.pagesize(),
        topMargin=top * inch,
        leftMargin=left * inch,
        bottomMargin=bottom * inch,
        rightMargin=right * inch,
    )
    doc.build(elements)
    return buffer.getvalue()


def build_deal_report(
    identity: LandIdentity,
    result: CalculationResult,
    options: Optional[PdfOptions] = None,
    basis: str = "100",
) -> bytes:
    """Render the cost sheet and payment schedule of a land deal."""
    options = options or PdfOptions()
    styles = _styles()
    fp_basis = basis == "60"
    elements = [
        Paragraph("LAND ACQUISITION DEAL SHEET", styles["ReportTitle"]),
        _key_value_table([
            ["Village", identity.village or "-"],
            ["TP Scheme", identity.tp_scheme or "-"],
            ["FP Number", identity.fp_number or "-"],
            ["Block / Survey No.", identity.block_survey_number or "-"],
            ["Prepared", datetime.now().strftime("%d %b %Y")],
        ]),
        Paragraph("Cost Sheet" + (" (FP 60% basis)" if fp_basis else ""), styles["SectionHeading"]),
        _key_value_table([
            ["Area (sq mt)", format_number(result.fp_area_sq_mt if fp_basis else result.area_sq_mt)],
            ["Area (vigha)", format_number(result.vigha_equivalent, 4)],
            ["Jantri value", _money(result.fp_jantri_value if fp_basis else result.total_jantri_value)],
            ["Stamp duty", _money(result.fp_stamp_duty if fp_basis else result.stamp_duty)],
            ["Additional expenses", _money(result.total_additional_expenses)],
            ["Landed cost", _money(result.landed_cost_for_basis(basis))],
            ["Cost per sq mt", _money(result.fp_cost_per_sq_mt if fp_basis else result.cost_per_sq_mt)],
            ["Cost per vaar", _money(result.fp_cost_per_vaar if fp_basis else result.cost_per_vaar)],
            ["Cost per vigha", _money(result.fp_cost_per_vigha if fp_basis else result.cost_per_vigha)],
        ]),
        Paragraph("Payment Schedule", styles["SectionHeading"]),
    ]
    body = [
        [str(item.id), format_date(item.date), item.description, _money(item.amount)]
        for item in result.schedule
    ]
    body.append(["", "", "Total", _money(result.grand_total_payment)])
    elements.append(_grid_table(["#", "Due Date", "Description", "Amount"], body, [0.5, 1.3, 2.6, 1.8]))
    elements.append(Spacer(1, 0.3 * inch))
    elements.append(Paragraph("Computer generated statement. Figures are indicative.", styles["Footer"]))
    logger.info("Rendering deal report for %s", identity.village or "unnamed village")
    return _render(elements, options)


def build_plot_deal_report(
    plot: PlotSale,
    deal: PlotDealState,
    project_identity: LandIdentity,
    options: Optional[PdfOptions] = None,
) -> bytes:
    """Render a plot's payment timeline with paid and pending rows."""
    options = options or PdfOptions()
    styles = _styles()
    schedule = deal.schedule
    elements = [
        Paragraph(f"PLOT #{plot.plot_number} PAYMENT SCHEDULE", styles["ReportTitle"]),
        _key_value_table([
            ["Project", project_identity.village or "-"],
            ["Customer", plot.customer_name or "-"],
            ["Phone", plot.phone_number or "-"],
            ["Plot area (vaar)", format_number(plot.area_vaar)],
            ["Deal date", format_date(deal.start_date)],
            ["Status", deal_status(schedule)],
        ]),
        Paragraph("Installments", styles["SectionHeading"]),
    ]
    body = []
    for row in schedule:
        paid = _money(row.paid_amount) if row.is_paid and row.paid_amount is not None else "-"
        body.append([
            row.label,
            format_date(row.due_date),
            "Paid" if row.is_paid else "Pending",
            paid,
            _money(row.expected_amount),
        ])
    table = _grid_table(["Description", "Due Date", "Status", "Received", "Expected"], body, [2.0, 1.1, 0.8, 1.5, 1.5])
    for i, row in enumerate(schedule, start=1):
        if row.is_paid:
            table.setStyle(TableStyle([("BACKGROUND", (0, i), (-1, i), PAID_GREEN)]))
    elements.append(table)
    elements.append(Spacer(1, 0.2 * inch))
    elements.append(_key_value_table([
        ["Total value", _money(total_expected(schedule))],
        ["Received", _money(total_received(schedule))],
        ["Outstanding", _money(outstanding(schedule))],
    ]))
    if deal.agent_name:
        elements.append(Spacer(1, 0.2 * inch))
        elements.append(_key_value_table([
            ["Agent", deal.agent_name],
            ["Agent commission", _money(deal.agent_commission)],
        ]))
    logger.info("Rendering plot deal report for plot %s", plot.plot_number)
    return _render(elements, options)
