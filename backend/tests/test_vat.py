"""Tests for TVA resolution by postal code."""
from decimal import Decimal

import pytest

from app.core.vat import Territory, resolve_vat_rate, territory_for_postal_code


class TestResolveVatRate:
    @pytest.mark.parametrize("postal_code,expected", [
        ("75001", Decimal("0.20")),
        ("69003", Decimal("0.20")),
        ("97100", Decimal("0.085")),  # Guadeloupe
        ("97200", Decimal("0.085")),  # Martinique
        ("97300", Decimal("0")),      # Guyane
        ("97400", Decimal("0.085")),  # Réunion
        ("97600", Decimal("0")),      # Mayotte
    ])
    def test_rates(self, postal_code, expected):
        assert resolve_vat_rate(postal_code) == expected

    def test_empty_defaults_to_metropole(self):
        assert resolve_vat_rate("") == Decimal("0.20")
        assert resolve_vat_rate(None) == Decimal("0.20")

    def test_other_97_prefix_is_metropole(self):
        # Saint-Pierre-et-Miquelon (975) is not a DROM
        assert resolve_vat_rate("97500") == Decimal("0.20")

    def test_short_code(self):
        assert resolve_vat_rate("97") == Decimal("0.20")


class TestTerritory:
    def test_territories(self):
        assert territory_for_postal_code("97200") == Territory.ANTILLES
        assert territory_for_postal_code("97300") == Territory.GUYANE
        assert territory_for_postal_code("13001") == Territory.METROPOLE
