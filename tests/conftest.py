"""Shared fixtures for the land deal planner tests."""

from datetime import date
from decimal import Decimal

import pytest

from land_deal.data_models import (
    DownPaymentRule,
    DownPaymentType,
    Duration,
    DurationUnit,
    Financials,
    LandIdentity,
    Measurements,
    Overheads,
    PlotDealState,
    StampDutyType,
)
from land_deal.timeline import build_deal_timeline
from land_deal_web.app import create_app
from land_deal_web.config import Config
from land_deal_web.project_store import ProjectStore


@pytest.fixture
def identity() -> LandIdentity:
    return LandIdentity(village="Sanand", tp_scheme="12", fp_number="45 A", block_survey_number="301/2")


@pytest.fixture
def measurements() -> Measurements:
    """10,000 sq mt at a jantri rate of 1,000: jantri value 1 crore."""
    return Measurements(area_sq_mt=Decimal("10000"), jantri_rate=Decimal("1000"))


@pytest.fixture
def financials() -> Financials:
    """5 crore deal, 10 % down, five installments."""
    return Financials(
        total_deal_price=Decimal("50000000"),
        down_payment_percent=Decimal("10"),
        number_of_installments=5,
        purchase_date=date(2024, 1, 1),
    )


@pytest.fixture
def overheads() -> Overheads:
    return Overheads(
        stamp_duty_type=StampDutyType.JANTRI,
        stamp_duty_percent=Decimal("4.9"),
        architect_fees=Decimal("100000"),
        plan_pass_fees=Decimal("50000"),
        na_expense=Decimal("25000"),
        na_premium=Decimal("25000"),
    )


@pytest.fixture
def deal_payload() -> dict:
    """Raw deal input as the browser posts it."""
    return {
        "identity": {"village": "Sanand", "tpScheme": "12", "fpNumber": "45", "blockSurveyNumber": "301/2"},
        "measurements": {"areaSqMt": "10,000", "jantriRate": "1000"},
        "financials": {
            "totalDealPrice": "5,00,00,000",
            "downPaymentPercent": "10",
            "numberOfInstallments": "5",
            "purchaseDate": "2024-01-01",
        },
        "overheads": {
            "stampDutyType": "Jantri",
            "stampDutyPercent": "4.9",
            "architectFees": "100000",
            "planPassFees": "50000",
            "naExpense": "25000",
            "naPremium": "25000",
        },
        "analysisUnit": "Vigha",
        "costSheetBasis": "100",
    }


@pytest.fixture
def plot_deal() -> PlotDealState:
    """A 10 lakh plot: 10 % down after one month, three installments over a year."""
    deal = PlotDealState(
        start_date=date(2024, 1, 15),
        dp_amount=Decimal("10"),
        dp_type=DownPaymentType.PERCENT,
        dp_duration=Duration(Decimal("1"), DurationUnit.MONTHS),
        total_duration=Duration(Decimal("13"), DurationUnit.MONTHS),
        num_installments=Decimal("3"),
    )
    return build_deal_timeline(deal, Decimal("1000000"))


@pytest.fixture
def dp_rule() -> DownPaymentRule:
    return DownPaymentRule(type=DownPaymentType.PERCENT, amount=Decimal("10"))


@pytest.fixture
def store(tmp_path) -> ProjectStore:
    return ProjectStore(f"sqlite:///{tmp_path / 'projects.sqlite3'}")


@pytest.fixture
def client(store):
    app = create_app(Config(), store=store)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
