from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from app.api.regularisations import ChargeLineIn, to_charge_lines
from app.core.lease_status import (
    CANCELLED,
    DRAFT,
    STATUSES,
    STATUS_LABELS,
    LeaseTransitionError,
    apply_transition,
)
from app.db.database import get_db
from app.models.lease import Lease
from app.models.property import Property
from app.services.lease_termination import terminate_lease

router = APIRouter()


class LeaseCreate(BaseModel):
    property_id: int
    tenant_name: str
    start_date: date
    end_date: date | None = None
    rent_amount: float
    charges_amount: float = 0

    @field_validator("rent_amount")
    @classmethod
    def positive_rent(cls, v):
        if v <= 0:
            raise ValueError("Le loyer doit être strictement positif.")
        return v

    @field_validator("charges_amount")
    @classmethod
    def positive_charges(cls, v):
        if v < 0:
            raise ValueError("La provision pour charges doit être positive.")
        return v


class LeaseUpdate(BaseModel):
    tenant_name: str | None = None
    end_date: date | None = None
    rent_amount: float | None = None
    charges_amount: float | None = None


class LeaseResponse(BaseModel):
    id: int
    property_id: int
    tenant_name: str
    start_date: date
    end_date: date | None
    rent_amount: float
    charges_amount: float
    status: str

    model_config = {"from_attributes": True}


class TerminationRequest(BaseModel):
    termination_date: date
    charges: list[ChargeLineIn] = []


def _get_lease_or_404(lease_id: int, db: Session) -> Lease:
    lease = db.query(Lease).filter(Lease.id == lease_id).first()
    if not lease:
        raise HTTPException(status_code=404, detail="Bail introuvable.")
    return lease


@router.get("/statuses")
def list_statuses():
    return [{"key": k, "label": v} for k, v in STATUS_LABELS.items()]


@router.get("/", response_model=list[LeaseResponse])
def list_leases(
    property_id: int | None = None,
    status: str | None = None,
    db: Session = Depends(get_db),
):
    if status and status not in STATUSES:
        raise HTTPException(status_code=422, detail=f"Statut de bail inconnu : {status}")
    q = db.query(Lease)
    if property_id:
        q = q.filter(Lease.property_id == property_id)
    if status:
        q = q.filter(Lease.status == status)
    return q.order_by(Lease.start_date).all()


@router.post("/", response_model=LeaseResponse, status_code=status.HTTP_201_CREATED)
def create_lease(data: LeaseCreate, db: Session = Depends(get_db)):
    prop = db.query(Property).filter(Property.id == data.property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Bien introuvable.")
    if data.end_date and data.end_date < data.start_date:
        raise HTTPException(status_code=422, detail="La date de fin précède la date de début.")
    lease = Lease(**data.model_dump(), status=DRAFT)
    db.add(lease)
    db.commit()
    db.refresh(lease)
    return lease


@router.get("/{lease_id}", response_model=LeaseResponse)
def get_lease(lease_id: int, db: Session = Depends(get_db)):
    return _get_lease_or_404(lease_id, db)


@router.put("/{lease_id}", response_model=LeaseResponse)
def update_lease(lease_id: int, data: LeaseUpdate, db: Session = Depends(get_db)):
    lease = _get_lease_or_404(lease_id, db)
    for field, value in data.model_dump(exclude_none=True).items():
        setattr(lease, field, value)
    db.commit()
    db.refresh(lease)
    return lease


@router.delete("/{lease_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_lease(lease_id: int, db: Session = Depends(get_db)):
    lease = _get_lease_or_404(lease_id, db)
    if lease.status not in (DRAFT, CANCELLED):
        raise HTTPException(status_code=409, detail="Seul un bail brouillon ou annulé peut être supprimé.")
    db.delete(lease)
    db.commit()


@router.post("/{lease_id}/transitions/{name}", response_model=LeaseResponse)
def transition_lease(lease_id: int, name: str, db: Session = Depends(get_db)):
    lease = _get_lease_or_404(lease_id, db)
    if name == "TERMINATE":
        raise HTTPException(
            status_code=409,
            detail=f"La résiliation passe par /api/leases/{lease_id}/terminate.",
        )
    try:
        lease.status = apply_transition(name, lease.status)
    except LeaseTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    db.commit()
    db.refresh(lease)
    return lease


@router.post("/{lease_id}/terminate")
def terminate(lease_id: int, data: TerminationRequest, db: Session = Depends(get_db)):
    """
    Terminate the lease, issue the prorated final invoice and, when real charges
    are provided, record the charges regularisation of the termination year.
    Either every step is kept or the completed ones are compensated.
    """
    lease = _get_lease_or_404(lease_id, db)
    if data.termination_date < lease.start_date:
        raise HTTPException(status_code=422, detail="La date de résiliation précède le début du bail.")

    charges = to_charge_lines(data.charges, data.termination_date.year)
    result = terminate_lease(db, lease, data.termination_date, charges)
    if not result.success:
        raise HTTPException(
            status_code=409,
            detail={
                "message": "La résiliation n'a pas pu être menée à terme.",
                "failed_step": result.failed_step,
                "error": result.error,
                "compensated": result.compensated,
            },
        )

    db.refresh(lease)
    return {
        "lease": LeaseResponse.model_validate(lease).model_dump(mode="json"),
        "final_invoice_id": result.results[1],
        "regularisation_id": result.results[2] if len(result.results) > 2 else None,
    }
