"""
Seed script: loads sample_dataset.json into the database.
Usage: python -m app.db.seed
"""
import json
from datetime import date
from decimal import Decimal
from pathlib import Path

from app.core.fees import compute_fees
from app.db.database import SessionLocal, init_db
from app.models.invoice import Invoice
from app.models.lease import Lease
from app.models.property import Property


def seed():
    init_db()
    db = SessionLocal()

    dataset_path = Path(__file__).parent.parent.parent / "tests" / "fixtures" / "sample_dataset.json"
    with open(dataset_path) as f:
        data = json.load(f)

    # Create property
    prop = Property(**data["property"])
    db.add(prop)
    db.flush()

    lease_data = data["lease"]
    lease = Lease(
        property_id=prop.id,
        tenant_name=lease_data["tenant_name"],
        start_date=date.fromisoformat(lease_data["start_date"]),
        rent_amount=lease_data["rent_amount"],
        charges_amount=lease_data["charges_amount"],
        status=lease_data["status"],
    )
    db.add(lease)
    db.flush()

    # Paid monthly invoices
    rent = Decimal(str(lease_data["rent_amount"]))
    charges = Decimal(str(lease_data["charges_amount"]))
    fees = compute_fees(rent, prop.fee_rate_ht, prop.postal_code)
    for item in data["paid_periods"]:
        db.add(Invoice(
            lease_id=lease.id,
            period=item["period"],
            kind="monthly",
            rent_amount=rent,
            charges_amount=charges,
            fees_ttc=fees.total_ttc,
            total_amount=rent + charges,
            status="paid",
            paid_at=date.fromisoformat(item["paid_at"]),
        ))

    db.commit()
    db.close()
    print(f"✅ Seed completed: property '{data['property']['name']}' with lease of {lease_data['tenant_name']}.")


if __name__ == "__main__":
    seed()
