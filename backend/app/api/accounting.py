from datetime import date

from fastapi import APIRouter
from pydantic import BaseModel, field_validator, model_validator

from app.core.fees import DEFAULT_POSTAL_CODE, compute_fees, compute_remittance
from app.core.prorata import compute_prorata
from app.core.vat import resolve_vat_rate, territory_for_postal_code

router = APIRouter()


class FeesRequest(BaseModel):
    gross_rent: float
    fee_rate_ht: float = 0.07
    postal_code: str = DEFAULT_POSTAL_CODE

    @field_validator("gross_rent")
    @classmethod
    def positive_rent(cls, v):
        if v < 0:
            raise ValueError("Le loyer doit être positif.")
        return v

    @field_validator("fee_rate_ht")
    @classmethod
    def valid_rate(cls, v):
        if not 0 <= v <= 1:
            raise ValueError("Le taux d'honoraires doit être compris entre 0 et 1.")
        return v


class RemittanceRequest(BaseModel):
    rent_collected: float
    charges_collected: float = 0
    fee_rate_ht: float = 0.07
    repair_deductions: float = 0
    other_deductions: float = 0
    postal_code: str = DEFAULT_POSTAL_CODE

    @field_validator("rent_collected", "charges_collected", "repair_deductions", "other_deductions")
    @classmethod
    def positive_amounts(cls, v):
        if v < 0:
            raise ValueError("Les montants doivent être positifs.")
        return v


class ProrataRequest(BaseModel):
    start_date: date
    end_date: date
    year: int

    @model_validator(mode="after")
    def valid_year(self):
        if not 1900 <= self.year <= 2200:
            raise ValueError("Année invalide.")
        return self


@router.get("/vat-rate")
def vat_rate(postal_code: str = ""):
    return {
        "postal_code": postal_code,
        "territory": territory_for_postal_code(postal_code).value,
        "vat_rate": float(resolve_vat_rate(postal_code)),
    }


@router.post("/fees")
def fees(data: FeesRequest):
    result = compute_fees(data.gross_rent, data.fee_rate_ht, data.postal_code)
    return {
        "gross_rent": float(result.gross_rent),
        "fee_rate_ht": float(result.fee_rate_ht),
        "fee_amount_ht": float(result.fee_amount_ht),
        "vat_rate": float(result.vat_rate),
        "vat_amount": float(result.vat_amount),
        "total_ttc": float(result.total_ttc),
        "net_to_owner": float(result.net_to_owner),
    }


@router.post("/remittance")
def remittance(data: RemittanceRequest):
    result = compute_remittance(
        data.rent_collected,
        data.charges_collected,
        data.fee_rate_ht,
        data.repair_deductions,
        data.other_deductions,
        data.postal_code,
    )
    return {
        "rent_collected": float(result.rent_collected),
        "charges_collected": float(result.charges_collected),
        "fees_ttc": float(result.fees_ttc),
        "repair_deductions": float(result.repair_deductions),
        "other_deductions": float(result.other_deductions),
        "amount_remitted": float(result.amount_remitted),
    }


@router.post("/prorata")
def prorata(data: ProrataRequest):
    result = compute_prorata(data.start_date, data.end_date, data.year)
    return {
        "occupied_days": result.occupied_days,
        "total_days_in_year": result.total_days_in_year,
        "ratio": float(result.ratio),
    }
