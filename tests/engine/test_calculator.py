"""Tests for the income tax calculators.

These tests cover:
- Bracket tax per zone and at zone boundaries
- Joint assessment (splitting)
- Solidarity surcharge thresholds and phase-in
- Church tax rates by federal state
- Total and differential tax
"""

from decimal import Decimal

import pytest

from gbr_reserve.engine.calculator import (
    classify_income_zone,
    compute_bracket_tax,
    compute_church_tax,
    compute_differential_tax,
    compute_income_tax,
    compute_joint_tax,
    compute_solidarity_surcharge,
    compute_total_tax,
)
from gbr_reserve.engine.diagnostics import Diagnostics
from gbr_reserve.tax.states import FederalState
from gbr_reserve.tax.year_config import (
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    BracketZone,
    TaxYearConfig,
)


# =============================================================================
# Bracket Tax Tests
# =============================================================================


class TestBracketTax:
    """Tests for the piecewise bracket formula."""

    @pytest.mark.parametrize("income", ["0", "1", "5000", "12095", "12096"])
    def test_zero_up_to_basic_allowance(self, income: str) -> None:
        """Income up to the basic allowance is tax free."""
        assert compute_bracket_tax(Decimal(income), TAX_YEAR_2025) == Decimal("0")

    def test_zero_up_to_basic_allowance_2024(self) -> None:
        assert compute_bracket_tax(Decimal("11784"), TAX_YEAR_2024) == Decimal("0")
        assert compute_bracket_tax(Decimal("12000"), TAX_YEAR_2024) > Decimal("0")

    @pytest.mark.parametrize(
        ("income", "expected"),
        [
            ("40000", "7320"),
            ("42000", "7966"),
            ("50000", "10691"),
            ("70000", "18488"),
            ("100000", "31088"),
            ("300000", "115753"),
        ],
    )
    def test_known_values_2025(self, income: str, expected: str) -> None:
        """Known 2025 amounts across progressive and proportional zones."""
        assert compute_bracket_tax(Decimal(income), TAX_YEAR_2025) == Decimal(expected)

    def test_income_floored_before_calculation(self) -> None:
        """Cents are dropped before the formula is applied."""
        assert compute_bracket_tax(
            Decimal("40000.99"), TAX_YEAR_2025
        ) == compute_bracket_tax(Decimal("40000"), TAX_YEAR_2025)

    def test_result_is_whole_euros(self) -> None:
        tax = compute_bracket_tax(Decimal("54321"), TAX_YEAR_2025)
        assert tax == tax.to_integral_value()

    def test_monotonic_over_income_range(self) -> None:
        """Higher income never yields lower tax."""
        previous = Decimal("0")
        for income in range(0, 400_000, 250):
            tax = compute_bracket_tax(Decimal(income), TAX_YEAR_2025)
            assert tax >= previous, f"tax dropped at {income}"
            previous = tax

    def test_monotonic_across_zone_boundaries(self) -> None:
        """Stepping over each boundary by one euro never lowers tax."""
        for config in (TAX_YEAR_2024, TAX_YEAR_2025):
            for zone in config.zones[:-1]:
                bound = zone.upper_bound
                assert compute_bracket_tax(bound + 1, config) >= compute_bracket_tax(
                    bound, config
                )

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), None, -5000])
    def test_invalid_income_is_zero(self, value: object) -> None:
        """NaN, infinity, None and negative income yield zero, not NaN."""
        assert compute_bracket_tax(value, TAX_YEAR_2025) == Decimal("0")

    def test_uses_default_tax_year(self) -> None:
        assert compute_bracket_tax(Decimal("70000")) == Decimal("18488")


class TestClassifyIncomeZone:
    """Tests for zone classification."""

    def test_boundary_belongs_to_lower_zone(self) -> None:
        assert classify_income_zone(Decimal("12096"), TAX_YEAR_2025) == 1
        assert classify_income_zone(Decimal("12097"), TAX_YEAR_2025) == 2
        assert classify_income_zone(Decimal("68480"), TAX_YEAR_2025) == 3
        assert classify_income_zone(Decimal("68481"), TAX_YEAR_2025) == 4

    def test_joint_classifies_half_income(self) -> None:
        assert classify_income_zone(Decimal("30000"), TAX_YEAR_2025) == 3
        assert classify_income_zone(Decimal("30000"), TAX_YEAR_2025, is_joint=True) == 2
        assert (
            classify_income_zone(Decimal("24192"), TAX_YEAR_2025, is_joint=True) == 1
        )

    def test_top_zone(self) -> None:
        assert classify_income_zone(Decimal("1000000"), TAX_YEAR_2025) == 5

    def test_nan_is_first_zone(self) -> None:
        assert classify_income_zone(float("nan"), TAX_YEAR_2025) == 1


# =============================================================================
# Joint Assessment Tests
# =============================================================================


class TestJointTax:
    """Tests for the splitting method."""

    @pytest.mark.parametrize(
        "income", ["0", "24192", "30001", "80000", "137001", "650000"]
    )
    def test_joint_is_twice_tax_on_half(self, income: str) -> None:
        amount = Decimal(income)
        assert compute_joint_tax(amount, TAX_YEAR_2025) == 2 * compute_bracket_tax(
            amount / 2, TAX_YEAR_2025
        )

    def test_known_value(self) -> None:
        assert compute_joint_tax(Decimal("80000"), TAX_YEAR_2025) == Decimal("14640")

    def test_joint_never_exceeds_individual(self) -> None:
        for income in range(0, 300_000, 5000):
            amount = Decimal(income)
            assert compute_joint_tax(amount, TAX_YEAR_2025) <= compute_bracket_tax(
                amount, TAX_YEAR_2025
            )

    def test_income_tax_selects_path(self) -> None:
        amount = Decimal("80000")
        assert compute_income_tax(amount, True, TAX_YEAR_2025) == Decimal("14640")
        assert compute_income_tax(amount, False, TAX_YEAR_2025) == compute_bracket_tax(
            amount, TAX_YEAR_2025
        )


# =============================================================================
# Surcharge Tests
# =============================================================================


class TestSolidaritySurcharge:
    """Tests for the solidarity surcharge."""

    def test_zero_at_and_below_threshold(self) -> None:
        assert compute_solidarity_surcharge(Decimal("0"), False, TAX_YEAR_2025) == 0
        assert (
            compute_solidarity_surcharge(Decimal("19950"), False, TAX_YEAR_2025) == 0
        )
        assert compute_solidarity_surcharge(Decimal("39900"), True, TAX_YEAR_2025) == 0

    def test_phase_in_uses_smaller_amount(self) -> None:
        """Just above the limit only 20% of the excess is due."""
        result = compute_solidarity_surcharge(Decimal("20000"), False, TAX_YEAR_2025)
        assert result == Decimal("10")

    def test_phase_in_never_exceeds_full_rate(self) -> None:
        for tax in range(19951, 27517, 97):
            amount = Decimal(tax)
            result = compute_solidarity_surcharge(amount, False, TAX_YEAR_2025)
            assert result <= amount * Decimal("0.055")

    def test_phase_in_may_be_fractional(self) -> None:
        result = compute_solidarity_surcharge(Decimal("19951"), False, TAX_YEAR_2025)
        assert result == Decimal("0.2")

    def test_full_rate_above_phase_in(self) -> None:
        """Above the band the full 5.5% applies, floored."""
        result = compute_solidarity_surcharge(Decimal("31088"), False, TAX_YEAR_2025)
        assert result == Decimal("1709")

    def test_joint_threshold_is_higher(self) -> None:
        tax = Decimal("30000")
        assert compute_solidarity_surcharge(tax, False, TAX_YEAR_2025) > 0
        assert compute_solidarity_surcharge(tax, True, TAX_YEAR_2025) == 0

    def test_no_cliff_at_threshold(self) -> None:
        """One euro over the limit costs cents, not hundreds."""
        result = compute_solidarity_surcharge(Decimal("19951"), False, TAX_YEAR_2025)
        assert result < Decimal("1")


class TestChurchTax:
    """Tests for church tax."""

    def test_zero_for_non_members(self) -> None:
        for state in FederalState:
            assert (
                compute_church_tax(Decimal("50000"), False, state, TAX_YEAR_2025) == 0
            )

    def test_nine_percent_in_nrw(self) -> None:
        result = compute_church_tax(
            Decimal("7320"), True, FederalState.NORDRHEIN_WESTFALEN, TAX_YEAR_2025
        )
        assert result == Decimal("658")

    @pytest.mark.parametrize(
        "state", [FederalState.BAYERN, FederalState.BADEN_WUERTTEMBERG]
    )
    def test_eight_percent_in_bayern_and_bw(self, state: FederalState) -> None:
        assert compute_church_tax(Decimal("7320"), True, state, TAX_YEAR_2025) == (
            Decimal("585")
        )

    def test_unknown_jurisdiction_uses_nine_percent(self) -> None:
        assert compute_church_tax(
            Decimal("7320"), True, "Atlantis", TAX_YEAR_2025
        ) == Decimal("658")

    def test_state_by_name(self) -> None:
        assert compute_church_tax(
            Decimal("7320"), True, "Bayern", TAX_YEAR_2025
        ) == Decimal("585")


# =============================================================================
# Total and Differential Tax Tests
# =============================================================================


class TestTotalTax:
    """Tests for combined income tax and surcharges."""

    def test_components_sum_to_total(self) -> None:
        result = compute_total_tax(
            Decimal("100000"),
            is_church_member=True,
            federal_state=FederalState.HESSEN,
            config=TAX_YEAR_2025,
        )
        assert result.income_tax == Decimal("31088")
        assert result.solidarity_surcharge == Decimal("1709")
        assert result.church_tax == Decimal("2797")
        assert result.total_tax == (
            result.income_tax + result.solidarity_surcharge + result.church_tax
        )
        assert result.effective_rate == result.total_tax / Decimal("100000")

    def test_joint_path_applies_to_surcharges(self) -> None:
        """Joint filing uses the joint soli limit on the joint income tax."""
        result = compute_total_tax(Decimal("80000"), is_joint=True, config=TAX_YEAR_2025)
        assert result.income_tax == Decimal("14640")
        assert result.solidarity_surcharge == Decimal("0")

    def test_zero_income(self) -> None:
        result = compute_total_tax(Decimal("0"), config=TAX_YEAR_2025)
        assert result.total_tax == 0
        assert result.effective_rate == 0


class TestDifferentialTax:
    """Tests for the differential tax calculator."""

    def test_zero_increment_has_no_additional_tax(self) -> None:
        for base in ("0", "12000", "40000", "250000"):
            result = compute_differential_tax(
                Decimal(base), Decimal("0"), is_church_member=True, config=TAX_YEAR_2025
            )
            assert result.additional_tax == 0
            assert result.marginal_rate == 0

    def test_known_values(self) -> None:
        result = compute_differential_tax(
            Decimal("40000"),
            Decimal("30000"),
            is_church_member=True,
            federal_state=FederalState.NORDRHEIN_WESTFALEN,
            config=TAX_YEAR_2025,
        )
        assert result.base_tax == Decimal("7978")
        assert result.total_tax == Decimal("20151")
        assert result.additional_tax == Decimal("12173")
        assert result.marginal_rate == Decimal("12173") / Decimal("30000")
        assert not result.rate_capped

    def test_additional_components(self) -> None:
        result = compute_differential_tax(
            Decimal("40000"),
            Decimal("30000"),
            is_church_member=True,
            config=TAX_YEAR_2025,
        )
        additional = result.additional
        assert additional.income_tax == Decimal("18488") - Decimal("7320")
        assert additional.total_tax == (
            additional.income_tax
            + additional.solidarity_surcharge
            + additional.church_tax
        )

    def test_additional_tax_non_negative_for_positive_increment(self) -> None:
        for base in range(0, 150_000, 7500):
            for increment in (1, 1000, 30000, 120000):
                result = compute_differential_tax(
                    Decimal(base),
                    Decimal(increment),
                    is_church_member=True,
                    config=TAX_YEAR_2025,
                )
                assert result.additional_tax >= 0

    def test_negative_increment_has_zero_rate(self) -> None:
        result = compute_differential_tax(
            Decimal("40000"), Decimal("-10000"), config=TAX_YEAR_2025
        )
        assert result.marginal_rate == 0
        assert result.additional_tax < 0

    def test_nan_inputs_yield_zero(self) -> None:
        result = compute_differential_tax(float("nan"), float("nan"), config=TAX_YEAR_2025)
        assert result.additional_tax == 0
        assert result.marginal_rate == 0

    def test_rate_above_ceiling_is_capped_with_warning(self) -> None:
        config = TaxYearConfig(
            tax_year=2025,
            zones=(
                BracketZone(upper_bound=Decimal("1000")),
                BracketZone(
                    upper_bound=None, linear=Decimal("0.9"), constant=Decimal("-900")
                ),
            ),
            solidarity_threshold_single=Decimal("1000000"),
            solidarity_threshold_joint=Decimal("2000000"),
            solidarity_phase_in_end_single=Decimal("1000000"),
            solidarity_phase_in_end_joint=Decimal("2000000"),
        )
        diagnostics = Diagnostics()

        result = compute_differential_tax(
            Decimal("0"), Decimal("10000"), config=config, diagnostics=diagnostics
        )

        assert result.rate_capped
        assert result.marginal_rate == Decimal("0.55")
        assert result.additional.effective_rate == Decimal("0.81")
        assert [w.code for w in diagnostics.warnings] == ["marginal_rate_capped"]

    def test_non_monotonic_table_is_reported(self, steep_config: TaxYearConfig) -> None:
        diagnostics = Diagnostics()

        result = compute_differential_tax(
            Decimal("62000"),
            Decimal("1000"),
            config=steep_config,
            diagnostics=diagnostics,
        )

        assert result.additional_tax < 0
        assert "non_monotonic_tax" in [w.code for w in diagnostics.warnings]

    def test_statutory_table_raises_no_warnings(self) -> None:
        diagnostics = Diagnostics()
        compute_differential_tax(
            Decimal("40000"),
            Decimal("30000"),
            is_church_member=True,
            config=TAX_YEAR_2025,
            diagnostics=diagnostics,
        )
        assert diagnostics.warnings == ()
