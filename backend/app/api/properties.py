from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.models.property import Property

router = APIRouter()


def _check_postal_code(v):
    if v is not None and not (len(v) == 5 and v.isdigit()):
        raise ValueError("Le code postal doit comporter 5 chiffres.")
    return v


def _check_fee_rate(v):
    if v is not None and not 0 <= v <= 1:
        raise ValueError("Le taux d'honoraires doit être compris entre 0 et 1.")
    return v


class PropertyCreate(BaseModel):
    name: str
    address: str | None = None
    postal_code: str
    city: str | None = None
    owner_name: str
    owner_address: str | None = None
    fee_rate_ht: float | None = None

    @field_validator("postal_code")
    @classmethod
    def valid_postal_code(cls, v):
        return _check_postal_code(v)

    @field_validator("fee_rate_ht")
    @classmethod
    def valid_fee_rate(cls, v):
        return _check_fee_rate(v)


class PropertyUpdate(BaseModel):
    name: str | None = None
    address: str | None = None
    postal_code: str | None = None
    city: str | None = None
    owner_name: str | None = None
    owner_address: str | None = None
    fee_rate_ht: float | None = None

    @field_validator("postal_code")
    @classmethod
    def valid_postal_code(cls, v):
        return _check_postal_code(v)

    @field_validator("fee_rate_ht")
    @classmethod
    def valid_fee_rate(cls, v):
        return _check_fee_rate(v)


class PropertyResponse(BaseModel):
    id: int
    name: str
    address: str | None
    postal_code: str
    city: str | None
    owner_name: str
    owner_address: str | None
    fee_rate_ht: float | None
    is_active: bool

    model_config = {"from_attributes": True}


@router.get("/", response_model=list[PropertyResponse])
def list_properties(db: Session = Depends(get_db)):
    return db.query(Property).filter(Property.is_active).all()


@router.post("/", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(data: PropertyCreate, db: Session = Depends(get_db)):
    prop = Property(**data.model_dump())
    db.add(prop)
    db.commit()
    db.refresh(prop)
    return prop


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(property_id: int, db: Session = Depends(get_db)):
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Bien introuvable.")
    return prop


@router.put("/{property_id}", response_model=PropertyResponse)
def update_property(property_id: int, data: PropertyUpdate, db: Session = Depends(get_db)):
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Bien introuvable.")
    for field, value in data.model_dump(exclude_none=True).items():
        setattr(prop, field, value)
    db.commit()
    db.refresh(prop)
    return prop


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(property_id: int, db: Session = Depends(get_db)):
    prop = db.query(Property).filter(Property.id == property_id).first()
    if not prop:
        raise HTTPException(status_code=404, detail="Bien introuvable.")
    prop.is_active = False
    db.commit()
