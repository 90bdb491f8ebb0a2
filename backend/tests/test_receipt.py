"""Tests for the rent receipt PDF."""
from datetime import date

from app.utils.pdf_generator import generate_receipt_pdf, period_label

RECEIPT = {
    "owner_name": "Marie Dupont",
    "owner_address": "3 allée des Flamboyants, 97200 Fort-de-France",
    "tenant_name": "Jean Martin",
    "property_address": "12 rue Victor Hugo",
    "postal_code": "97200",
    "city": "Fort-de-France",
    "period": "2026-03",
    "rent_amount": 850,
    "charges_amount": 60,
    "total_amount": 910,
    "paid_at": date(2026, 3, 5),
}


class TestPeriodLabel:
    def test_labels(self):
        assert period_label("2026-03") == "mars 2026"
        assert period_label("2025-12") == "décembre 2025"


class TestReceiptPdf:
    def test_generates_pdf(self):
        pdf = generate_receipt_pdf(RECEIPT)
        assert pdf.startswith(b"%PDF")
        assert len(pdf) > 1000

    def test_missing_addresses(self):
        data = {**RECEIPT, "owner_address": None, "property_address": None, "city": None}
        assert generate_receipt_pdf(data).startswith(b"%PDF")
