"""Tests for the lease termination saga against the database."""
from datetime import date
from decimal import Decimal

import pytest

from app.core.regularisation import ChargeLine
from app.models.invoice import Invoice
from app.models.lease import Lease
from app.models.property import Property
from app.models.regularisation import ChargeRegularisation
from app.services.lease_termination import terminate_lease


@pytest.fixture
def lease(db):
    prop = Property(name="Studio Paris", address="1 rue Test", postal_code="75011", owner_name="Marie Dupont")
    db.add(prop)
    db.flush()
    lease = Lease(
        property_id=prop.id,
        tenant_name="Jean Martin",
        start_date=date(2025, 1, 1),
        rent_amount=1000,
        charges_amount=100,
        status="active",
    )
    db.add(lease)
    db.flush()
    for month in range(1, 6):
        db.add(Invoice(
            lease_id=lease.id,
            period=f"2026-{month:02d}",
            rent_amount=1000,
            charges_amount=100,
            fees_ttc=84,
            total_amount=1100,
            status="paid",
            paid_at=date(2026, month, 5),
        ))
    db.commit()
    return lease


def _charges():
    return [ChargeLine(type="eau_froide", label="Eau froide", total_amount=Decimal("1000"))]


class TestTerminateLease:
    def test_success_without_regularisation(self, db, lease):
        result = terminate_lease(db, lease, date(2026, 6, 15))
        assert result.success is True
        assert len(result.results) == 2

        db.refresh(lease)
        assert lease.status == "terminated"
        assert lease.end_date == date(2026, 6, 15)

        final = db.get(Invoice, result.results[1])
        assert final.kind == "final"
        assert final.period == "2026-06"
        # 15/30 of June
        assert Decimal(str(final.rent_amount)) == Decimal("500.00")
        assert Decimal(str(final.charges_amount)) == Decimal("50.00")
        assert Decimal(str(final.total_amount)) == Decimal("550.00")
        # 500 × 7 % × 1.2, default rate of the year
        assert Decimal(str(final.fees_ttc)) == Decimal("42.00")

    def test_success_with_regularisation(self, db, lease):
        result = terminate_lease(db, lease, date(2026, 6, 15), _charges())
        assert result.success is True
        record = db.get(ChargeRegularisation, result.results[2])
        # 1 Jan → 15 Jun = 166 days, 166/365 = 0.4548
        assert record.occupied_days == 166
        assert Decimal(str(record.prorata_ratio)) == Decimal("0.4548")
        assert Decimal(str(record.total_real_charges)) == Decimal("454.80")
        assert Decimal(str(record.provisions_collected)) == Decimal("500.00")
        assert Decimal(str(record.balance)) == Decimal("45.20")
        assert record.type == "credit"

    def test_invalid_transition_fails_first_step(self, db, lease):
        lease.status = "draft"
        db.commit()
        result = terminate_lease(db, lease, date(2026, 6, 15))
        assert result.success is False
        assert result.failed_step == "terminate_lease"
        assert result.compensated is False
        assert db.query(Invoice).filter(Invoice.kind == "final").count() == 0

    def test_invoice_failure_restores_lease(self, db, lease, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("calcul des honoraires indisponible")

        monkeypatch.setattr("app.services.lease_termination.compute_fees", boom)
        result = terminate_lease(db, lease, date(2026, 6, 15))
        assert result.success is False
        assert result.failed_step == "create_final_invoice"
        assert result.error == "calcul des honoraires indisponible"
        assert result.compensated is True

        db.refresh(lease)
        assert lease.status == "active"
        assert lease.end_date is None

    def test_regularisation_failure_removes_final_invoice(self, db, lease, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("régularisation impossible")

        monkeypatch.setattr("app.services.lease_termination.regularise_lease", boom)
        result = terminate_lease(db, lease, date(2026, 6, 15), _charges())
        assert result.success is False
        assert result.failed_step == "record_charge_regularisation"
        assert len(result.results) == 2

        db.refresh(lease)
        assert lease.status == "active"
        assert db.query(Invoice).filter(Invoice.kind == "final").count() == 0
        assert db.query(ChargeRegularisation).count() == 0

    def test_month_already_billed_gives_credit(self, db, lease):
        db.add(Invoice(
            lease_id=lease.id,
            period="2026-06",
            rent_amount=1000,
            charges_amount=100,
            fees_ttc=84,
            total_amount=1100,
            status="paid",
            paid_at=date(2026, 6, 5),
        ))
        db.commit()

        result = terminate_lease(db, lease, date(2026, 6, 15))
        assert result.success is True

        june = db.query(Invoice).filter(Invoice.period == "2026-06").order_by(Invoice.id).all()
        assert [i.kind for i in june] == ["monthly", "final"]
        final = june[1]
        # 15/30 of June minus the full month already billed
        assert Decimal(str(final.rent_amount)) == Decimal("-500.00")
        assert Decimal(str(final.charges_amount)) == Decimal("-50.00")
        assert Decimal(str(final.total_amount)) == Decimal("-550.00")
        assert Decimal(str(final.fees_ttc)) == Decimal("-42.00")
        billed = sum(Decimal(str(i.total_amount)) for i in june)
        assert billed == Decimal("550.00")

    def test_year_before_first_constants_file(self, db, lease):
        lease.start_date = date(2024, 1, 1)
        db.commit()

        result = terminate_lease(db, lease, date(2024, 6, 15), _charges())
        assert result.success is True

        final = db.get(Invoice, result.results[1])
        assert final.period == "2024-06"
        assert Decimal(str(final.rent_amount)) == Decimal("500.00")
        # default rate taken from the earliest constants file
        assert Decimal(str(final.fees_ttc)) == Decimal("42.00")

        record = db.get(ChargeRegularisation, result.results[2])
        # 2024 counts 366 days: 167/366 = 0.4563
        assert record.occupied_days == 167
        assert Decimal(str(record.prorata_ratio)) == Decimal("0.4563")
        assert Decimal(str(record.total_real_charges)) == Decimal("456.30")
        assert record.type == "debit"
