"""Tests for PDF reports and the terminal formatting helpers."""

from datetime import date
from decimal import Decimal

import pytest
from reportlab.lib.pagesizes import A4, landscape

from land_deal.data_models import LandIdentity, PlotSale
from land_deal.engine import compute_deal
from land_deal.formatter import format_currency, format_currency_short, format_date, format_number
from land_deal.reports import (
    PdfOptions,
    build_deal_report,
    build_plot_deal_report,
    deal_report_filename,
    plot_report_filename,
)


class TestFilenames:
    def test_deal_report(self):
        identity = LandIdentity(village="Navi Naroda", fp_number="45 A")
        assert deal_report_filename(identity) == "GDK_NEXUS_Navi_Naroda_FP45A.pdf"
        assert deal_report_filename(LandIdentity(), "ACME") == "ACME_Village_FPFP.pdf"

    def test_plot_report(self):
        plot = PlotSale(id="p", plot_number=7, area_vaar=Decimal("100"), customer_name="Ramesh Patel")
        assert plot_report_filename(plot) == "Deal_7_Ramesh_Patel.pdf"
        plot.customer_name = ""
        assert plot_report_filename(plot) == "Deal_7_Customer.pdf"


class TestPdfOptions:
    def test_page_size(self):
        assert PdfOptions().pagesize() == A4
        assert PdfOptions(orientation="landscape").pagesize() == landscape(A4)

    @pytest.mark.parametrize("options", [PdfOptions(page_size="a9"), PdfOptions(orientation="diagonal")])
    def test_invalid(self, options):
        with pytest.raises(ValueError):
            options.pagesize()


def test_deal_report_renders(identity, measurements, financials, overheads):
    result = compute_deal(identity, measurements, financials, overheads)
    for basis in ("100", "60"):
        content = build_deal_report(identity, result, PdfOptions(page_size="legal"), basis=basis)
        assert content.startswith(b"%PDF")


def test_plot_report_renders(identity, plot_deal):
    plot_deal.schedule[0].is_paid = True
    plot_deal.schedule[0].paid_amount = Decimal("100000")
    plot_deal.agent_name = "Mahesh"
    plot = PlotSale(id="p", plot_number=3, area_vaar=Decimal("250"), customer_name="Sita Shah", deal=plot_deal)
    assert build_plot_deal_report(plot, plot_deal, identity).startswith(b"%PDF")


class TestFormatting:
    def test_indian_grouping(self):
        assert format_number(Decimal("1234567.891")) == "12,34,567.89"
        assert format_number(Decimal("999")) == "999.00"
        assert format_number(Decimal("-100000"), 0) == "-1,00,000"

    def test_currency(self):
        assert format_currency(Decimal("50000")) == "₹50,000.00"
        assert format_currency_short(Decimal("25000000")) == "₹2.50 Cr"
        assert format_currency_short(Decimal("150000")) == "₹1.50 L"
        assert format_currency_short(Decimal("900")) == "₹900.00"

    def test_date(self):
        assert format_date(date(2024, 3, 5)) == "05 Mar 2024"
