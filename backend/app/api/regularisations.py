from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.regularisation import ChargeLine, RegularisationError, RegularisationResult
from app.db.database import get_db
from app.models.lease import Lease
from app.models.regularisation import ChargeRegularisation
from app.services.regularisation import regularise_lease, to_record
from app.utils.constants_loader import get_recoverable_charges

router = APIRouter()


class ChargeLineIn(BaseModel):
    type: str
    label: str | None = None
    total_amount: float
    quote_part: float = 100

    @field_validator("total_amount")
    @classmethod
    def positive_amount(cls, v):
        if v < 0:
            raise ValueError("Le montant d'une charge doit être positif.")
        return v

    @field_validator("quote_part")
    @classmethod
    def valid_quote_part(cls, v):
        if not 0 < v <= 100:
            raise ValueError("La quote-part doit être comprise entre 0 et 100 %.")
        return v


class RegularisationRequest(BaseModel):
    lease_id: int
    year: int
    charges: list[ChargeLineIn]


class RegularisationResponse(BaseModel):
    id: int
    lease_id: int
    year: int
    provisions_collected: float
    total_real_charges: float
    balance: float
    type: str
    occupied_days: int
    prorata_ratio: float
    details: list | None

    model_config = {"from_attributes": True}


def to_charge_lines(charges: list[ChargeLineIn], year: int) -> list[ChargeLine]:
    if not charges:
        return []
    labels = get_recoverable_charges(year)
    return [
        ChargeLine(
            type=c.type,
            label=c.label or labels.get(c.type, c.type),
            total_amount=c.total_amount,
            quote_part=c.quote_part,
        )
        for c in charges
    ]


def _serialize(lease_id: int, result: RegularisationResult) -> dict:
    return {
        "lease_id": lease_id,
        "year": result.year,
        "provisions_collected": float(result.provisions_collected),
        "total_real_charges": float(result.total_real_charges),
        "balance": float(result.balance),
        "type": result.type,
        "prorata": {
            "occupied_days": result.prorata.occupied_days,
            "total_days_in_year": result.prorata.total_days_in_year,
            "ratio": float(result.prorata.ratio),
        },
        "charges": [
            {
                "type": c.type,
                "label": c.label,
                "total_amount": float(c.total_amount),
                "quote_part": float(c.quote_part),
                "amount_due": float(c.amount_due),
            }
            for c in result.charges
        ],
    }


def _get_lease_or_404(lease_id: int, db: Session) -> Lease:
    lease = db.query(Lease).filter(Lease.id == lease_id).first()
    if not lease:
        raise HTTPException(status_code=404, detail="Bail introuvable.")
    return lease


def _compute(data: RegularisationRequest, db: Session) -> tuple[Lease, RegularisationResult]:
    lease = _get_lease_or_404(data.lease_id, db)
    try:
        result = regularise_lease(db, lease, data.year, to_charge_lines(data.charges, data.year))
    except RegularisationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return lease, result


@router.get("/charge-types")
def list_charge_types(year: int = 2026):
    """Return recoverable charge types (décret 87-713) with their labels."""
    return [{"key": k, "label": v} for k, v in get_recoverable_charges(year).items()]


@router.post("/compute")
def compute(data: RegularisationRequest, db: Session = Depends(get_db)):
    """Preview a regularisation without persisting it."""
    lease, result = _compute(data, db)
    return _serialize(lease.id, result)


@router.get("/", response_model=list[RegularisationResponse])
def list_regularisations(lease_id: int | None = None, db: Session = Depends(get_db)):
    q = db.query(ChargeRegularisation)
    if lease_id:
        q = q.filter(ChargeRegularisation.lease_id == lease_id)
    return q.order_by(ChargeRegularisation.year).all()


@router.post("/", response_model=RegularisationResponse, status_code=status.HTTP_201_CREATED)
def create_regularisation(data: RegularisationRequest, db: Session = Depends(get_db)):
    existing = (
        db.query(ChargeRegularisation)
        .filter(and_(ChargeRegularisation.lease_id == data.lease_id, ChargeRegularisation.year == data.year))
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail=f"Régularisation {data.year} déjà enregistrée.")
    lease, result = _compute(data, db)
    record = to_record(lease.id, result)
    db.add(record)
    db.commit()
    db.refresh(record)
    return record
