"""Tests for management fees and owner remittance."""
from decimal import Decimal

from app.core.fees import compute_fees, compute_remittance, round_amount


class TestComputeFees:
    def test_standard_metropole(self):
        result = compute_fees(1000, 0.07, "75000")
        assert result.gross_rent == Decimal("1000")
        assert result.fee_rate_ht == Decimal("0.07")
        assert result.fee_amount_ht == Decimal("70.00")
        assert result.vat_rate == Decimal("0.20")
        assert result.vat_amount == Decimal("14.00")
        assert result.total_ttc == Decimal("84.00")
        assert result.net_to_owner == Decimal("916.00")

    def test_rent_850(self):
        result = compute_fees(850, 0.07, "75001")
        assert result.fee_amount_ht == Decimal("59.50")
        assert result.vat_amount == Decimal("11.90")
        assert result.total_ttc == Decimal("71.40")
        assert result.net_to_owner == Decimal("778.60")

    def test_martinique_reduced_vat(self):
        """TVA 8,5 % en Martinique."""
        result = compute_fees(1000, 0.07, "97200")
        assert result.vat_rate == Decimal("0.085")
        assert result.vat_amount == Decimal("5.95")
        assert result.total_ttc == Decimal("75.95")
        assert result.net_to_owner == Decimal("924.05")

    def test_guyane_no_vat(self):
        result = compute_fees(1000, 0.07, "97300")
        assert result.vat_amount == Decimal("0")
        assert result.total_ttc == Decimal("70")
        assert result.net_to_owner == Decimal("930")

    def test_mayotte_no_vat(self):
        result = compute_fees(800, 0.07, "97600")
        assert result.fee_amount_ht == Decimal("56")
        assert result.total_ttc == Decimal("56")
        assert result.net_to_owner == Decimal("744")

    def test_other_rates(self):
        assert compute_fees(1000, 0.05, "75001").total_ttc == Decimal("60")
        assert compute_fees(1000, 0.10, "75001").total_ttc == Decimal("120")

    def test_defaults(self):
        """Default rate 7 % and Paris postal code."""
        assert compute_fees(1000) == compute_fees(1000, 0.07, "75000")

    def test_zero_rent(self):
        result = compute_fees(0, 0.07, "75001")
        assert result.fee_amount_ht == 0
        assert result.vat_amount == 0
        assert result.total_ttc == 0
        assert result.net_to_owner == 0

    def test_zero_rate(self):
        result = compute_fees(1000, 0, "75001")
        assert result.fee_amount_ht == 0
        assert result.total_ttc == 0
        assert result.net_to_owner == Decimal("1000")

    def test_decimals_rounded_at_output(self):
        """1234.56 × 7 % = 86.4192 → 86.42."""
        result = compute_fees(1234.56, 0.07, "75001")
        assert result.gross_rent == Decimal("1234.56")
        assert result.fee_amount_ht == Decimal("86.42")
        # 86.4192 × 1.2 = 103.70304, not 86.42 × 1.2 = 103.704
        assert result.total_ttc == Decimal("103.70")

    def test_half_rounds_up(self):
        """1.50 × 7 % = 0.105 → 0.11."""
        assert compute_fees(1.5, 0.07, "97300").fee_amount_ht == Decimal("0.11")

    def test_negative_rent_propagates(self):
        result = compute_fees(-1000, 0.07, "75000")
        assert result.total_ttc == Decimal("-84.00")
        assert result.net_to_owner == Decimal("-916.00")

    def test_nan_propagates(self):
        result = compute_fees(float("nan"), 0.07, "75000")
        assert result.fee_amount_ht.is_nan()
        assert result.net_to_owner.is_nan()

    def test_very_large_rent(self):
        result = compute_fees(1e30, 0.07, "75000")
        assert result.fee_amount_ht == Decimal("7E+28")
        assert result.total_ttc == Decimal("8.4E+28")
        assert result.net_to_owner == Decimal("9.16E+29")

    def test_infinite_rent(self):
        result = compute_fees(float("inf"), 0.07, "75000")
        assert result.total_ttc.is_infinite()
        assert result.net_to_owner.is_nan()

    def test_infinite_rent_without_vat(self):
        result = compute_fees(float("inf"), 0.07, "97300")
        assert result.fee_amount_ht.is_infinite()
        assert result.vat_amount.is_nan()

    def test_idempotent(self):
        assert compute_fees(987.65, 0.08, "97400") == compute_fees(987.65, 0.08, "97400")


class TestComputeRemittance:
    def test_rent_with_charges(self):
        result = compute_remittance(1000, 50, 0.07, 0, 0, "75000")
        assert result.fees_ttc == Decimal("84.00")
        assert result.amount_remitted == Decimal("966.00")

    def test_standard(self):
        result = compute_remittance(1000, 150, 0.07, 0, 0, "75001")
        assert result.rent_collected == Decimal("1000")
        assert result.charges_collected == Decimal("150")
        assert result.amount_remitted == Decimal("1066")

    def test_with_repairs_and_other_deductions(self):
        assert compute_remittance(1000, 150, 0.07, 200, 0, "75001").amount_remitted == Decimal("866")
        assert compute_remittance(1000, 150, 0.07, 0, 50, "75001").amount_remitted == Decimal("1016")
        assert compute_remittance(1000, 150, 0.07, 200, 50, "75001").amount_remitted == Decimal("816")

    def test_drom(self):
        result = compute_remittance(1000, 150, 0.07, 0, 0, "97200")
        assert result.fees_ttc == Decimal("75.95")
        assert result.amount_remitted == Decimal("1074.05")

    def test_negative_remittance_not_clamped(self):
        """Deductions above collections: the owner owes the agency."""
        result = compute_remittance(500, 50, 0.07, 600, 100, "75001")
        assert result.amount_remitted == Decimal("-192")

    def test_fees_plus_remittance_equal_collections(self):
        fees = compute_fees(1200, 0.07, "75001")
        remittance = compute_remittance(1200, 80, 0.07, 0, 0, "75001")
        assert fees.total_ttc == Decimal("100.80")
        assert remittance.amount_remitted == Decimal("1179.20")
        assert fees.total_ttc + remittance.amount_remitted == Decimal("1280")

    def test_year_of_management(self):
        total_fees = sum(compute_fees(950, 0.07, "75001").total_ttc for _ in range(12))
        total_remitted = sum(compute_remittance(950, 120, 0.07).amount_remitted for _ in range(12))
        assert total_fees == Decimal("957.60")
        assert total_remitted == Decimal("11882.40")


def test_round_amount_half_away_from_zero():
    assert round_amount(Decimal("2.345")) == Decimal("2.35")
    assert round_amount(Decimal("-2.345")) == Decimal("-2.35")


def test_round_amount_beyond_default_precision():
    value = Decimal("123456789012345678901234567890.125")
    assert round_amount(value) == Decimal("123456789012345678901234567890.13")
    assert round_amount(Decimal("Infinity")) == Decimal("Infinity")
    assert round_amount(Decimal("NaN")).is_nan()


def test_remittance_of_infinite_rent():
    result = compute_remittance(float("inf"), 0, 0.07, 0, 0, "75000")
    assert result.amount_remitted.is_nan()
