"""Charges regularisation of a stored lease: gathers paid provisions and persists the result."""
from datetime import date
from decimal import Decimal

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.prorata import compute_prorata
from app.core.regularisation import ChargeLine, RegularisationResult, compute_regularisation
from app.models.invoice import Invoice
from app.models.lease import Lease
from app.models.regularisation import ChargeRegularisation


def paid_provisions(db: Session, lease_id: int, year: int) -> list[Decimal]:
    invoices = (
        db.query(Invoice)
        .filter(
            and_(
                Invoice.lease_id == lease_id,
                Invoice.status == "paid",
                Invoice.period >= f"{year}-01",
                Invoice.period <= f"{year}-12",
            )
        )
        .order_by(Invoice.period)
        .all()
    )
    return [Decimal(str(inv.charges_amount or 0)) for inv in invoices]


def regularise_lease(
    db: Session,
    lease: Lease,
    year: int,
    charges: list[ChargeLine],
    until: date | None = None,
) -> RegularisationResult:
    """Compute the regularisation of `lease` for `year`; the occupancy ends at `until` or the lease end."""
    end = until or lease.end_date or date(year, 12, 31)
    prorata = compute_prorata(lease.start_date, end, year)
    return compute_regularisation(
        year=year,
        provisions=paid_provisions(db, lease.id, year),
        charges=charges,
        prorata=prorata,
    )


def to_record(lease_id: int, result: RegularisationResult) -> ChargeRegularisation:
    return ChargeRegularisation(
        lease_id=lease_id,
        year=result.year,
        provisions_collected=result.provisions_collected,
        total_real_charges=result.total_real_charges,
        balance=result.balance,
        type=result.type,
        occupied_days=result.prorata.occupied_days,
        prorata_ratio=result.prorata.ratio,
        details=[
            {
                "type": c.type,
                "label": c.label,
                "total_amount": float(c.total_amount),
                "quote_part": float(c.quote_part),
                "amount_due": float(c.amount_due),
            }
            for c in result.charges
        ],
    )
