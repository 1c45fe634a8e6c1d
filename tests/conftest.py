"""Pytest configuration and shared fixtures for tests."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from gbr_reserve.engine.models import PartnershipProfile, PartnerTaxProfile
from gbr_reserve.main import app
from gbr_reserve.tax.states import FederalState
from gbr_reserve.tax.year_config import TAX_YEAR_2025, BracketZone, TaxYearConfig


@pytest.fixture
def client() -> TestClient:
    """Create a test client for API testing.

    Returns:
        FastAPI TestClient instance.
    """
    return TestClient(app)


@pytest.fixture
def config_2025() -> TaxYearConfig:
    """Statutory 2025 constants."""
    return TAX_YEAR_2025


@pytest.fixture
def steep_config() -> TaxYearConfig:
    """Four-zone table with a steep first progressive zone.

    The first progressive zone runs far past the point where the linear zone
    takes over, so crossing into it from a low base is expensive and the
    table is not monotone around 62810.
    """
    return TaxYearConfig(
        tax_year=2025,
        zones=(
            BracketZone(upper_bound=Decimal("11908")),
            BracketZone(
                upper_bound=Decimal("62810"),
                floor=Decimal("11908"),
                quadratic=Decimal("1007.27"),
                linear=Decimal("1400"),
            ),
            BracketZone(
                upper_bound=Decimal("277825"),
                linear=Decimal("0.42"),
                constant=Decimal("-9336.45"),
            ),
            BracketZone(
                upper_bound=None,
                linear=Decimal("0.45"),
                constant=Decimal("-17671.20"),
            ),
        ),
        solidarity_threshold_single=Decimal("18130"),
        solidarity_threshold_joint=Decimal("36260"),
        solidarity_phase_in_end_single=Decimal("19730"),
        solidarity_phase_in_end_joint=Decimal("39460"),
    )


@pytest.fixture
def two_partners() -> list[PartnerTaxProfile]:
    """Two church members in NRW with base incomes 40000 and 12000, 50/50."""
    return [
        PartnerTaxProfile(
            id="a1b2c3d4",
            name="Anna",
            base_income=Decimal("40000"),
            share=Decimal("50"),
            is_church_member=True,
            federal_state=FederalState.NORDRHEIN_WESTFALEN,
        ),
        PartnerTaxProfile(
            id="e5f6a7b8",
            name="Ben",
            base_income=Decimal("12000"),
            share=Decimal("50"),
            is_church_member=True,
            federal_state=FederalState.NORDRHEIN_WESTFALEN,
        ),
    ]


@pytest.fixture
def partnership() -> PartnershipProfile:
    """Freelance partnership with 5000 monthly profit and a 5% margin."""
    return PartnershipProfile(
        monthly_profit=Decimal("5000"), safety_margin=Decimal("0.05")
    )
