"""Tests for the per-year rental constants."""
from decimal import Decimal

import pytest

from app.utils.constants_loader import (
    get_default_fee_rate,
    get_recoverable_charges,
    load_rental_constants,
    resolve_fee_rate,
)


class TestLoadRentalConstants:
    def test_load_2026(self):
        constants = load_rental_constants(2026)
        assert "management_fees" in constants
        assert "recoverable_charges" in constants

    def test_fallback_to_latest_previous_year(self):
        assert load_rental_constants(2031) == load_rental_constants(2026)

    def test_year_before_first_file_uses_earliest(self):
        assert load_rental_constants(1999) == load_rental_constants(2025)

    def test_empty_directory(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RENTAL_CONSTANTS_PATH", str(tmp_path))
        with pytest.raises(FileNotFoundError):
            load_rental_constants(2026)

    def test_custom_path(self, tmp_path, monkeypatch):
        (tmp_path / "2024.yaml").write_text("management_fees:\n  default_rate_ht: 0.08\n")
        monkeypatch.setenv("RENTAL_CONSTANTS_PATH", str(tmp_path))
        assert get_default_fee_rate(2024) == Decimal("0.08")
        assert get_recoverable_charges(2024) == {}


class TestFeeRate:
    def test_default_rate(self):
        assert get_default_fee_rate(2026) == Decimal("0.07")

    def test_negotiated_rate_wins(self):
        assert resolve_fee_rate(0.065, 2026) == Decimal("0.065")

    def test_no_negotiated_rate(self):
        assert resolve_fee_rate(None, 2026) == Decimal("0.07")

    def test_recoverable_charges_labels(self):
        charges = get_recoverable_charges(2026)
        assert charges["eau_froide"] == "Eau froide"
        assert "interphone" in charges

    def test_default_rate_without_constants(self, tmp_path, monkeypatch):
        monkeypatch.setenv("RENTAL_CONSTANTS_PATH", str(tmp_path))
        assert get_default_fee_rate(2026) == Decimal("0.07")
        assert resolve_fee_rate(None, 2026) == Decimal("0.07")
