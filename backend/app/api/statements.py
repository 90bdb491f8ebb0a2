from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.models.lease import Lease
from app.models.property import Property
from app.services.statements import StatementError, owner_statement, tenant_situation

router = APIRouter()


@router.get("/owner/{property_id}")
def get_owner_statement(property_id: int, start: date, end: date, db: Session = Depends(get_db)):
    """Compte rendu de gestion (CRG) of a property for the periods between start and end."""
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Bien introuvable.")
    try:
        statement = owner_statement(db, prop, start, end)
    except StatementError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "property": {
            "id": prop.id,
            "name": prop.name,
            "address": prop.address,
            "postal_code": prop.postal_code,
            "city": prop.city,
            "owner_name": prop.owner_name,
        },
        "start": statement.start.isoformat(),
        "end": statement.end.isoformat(),
        "opening_balance": float(statement.opening_balance),
        "movements": [
            {
                "date": m.value_date.isoformat(),
                "reference": m.reference,
                "label": m.label,
                "type": m.type,
                "category": m.category,
                "amount": float(m.amount),
                "running_balance": float(m.running_balance),
                "invoice_id": m.invoice_id,
            }
            for m in statement.movements
        ],
        "total_credits": float(statement.total_credits),
        "total_debits": float(statement.total_debits),
        "closing_balance": float(statement.closing_balance),
        "summary": {
            "collected": float(statement.collected),
            "fees_ttc": float(statement.fees_ttc),
            "amount_remitted": float(statement.amount_remitted),
        },
    }


@router.get("/tenant/{lease_id}")
def get_tenant_situation(lease_id: int, as_of: date | None = None, db: Session = Depends(get_db)):
    lease = db.query(Lease).filter(Lease.id == lease_id).first()
    if not lease:
        raise HTTPException(status_code=404, detail="Bail introuvable.")
    situation = tenant_situation(db, lease, as_of)
    return {
        "lease_id": lease.id,
        "tenant_name": lease.tenant_name,
        "as_of": situation.as_of.isoformat(),
        "months_elapsed": situation.months_elapsed,
        "history": [
            {
                "period": line.period,
                "kind": line.kind,
                "amount_called": float(line.amount_called),
                "amount_paid": float(line.amount_paid),
                "balance": float(line.balance),
                "status": line.status,
                "paid_at": line.paid_at.isoformat() if line.paid_at else None,
            }
            for line in situation.lines
        ],
        "total_called": float(situation.total_called),
        "total_paid": float(situation.total_paid),
        "balance_due": float(situation.balance_due),
        "up_to_date": situation.up_to_date,
    }
