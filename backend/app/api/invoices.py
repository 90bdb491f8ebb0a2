import logging
import re
from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from pydantic import BaseModel, field_validator
from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.fees import compute_fees, compute_remittance
from app.db.database import get_db
from app.models.invoice import Invoice
from app.models.lease import Lease
from app.utils.constants_loader import resolve_fee_rate
from app.utils.pdf_generator import generate_receipt_pdf

logger = logging.getLogger(__name__)

router = APIRouter()

PERIOD_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class InvoiceCreate(BaseModel):
    lease_id: int
    period: str
    rent_amount: float | None = None  # defaults to the lease rent
    charges_amount: float | None = None  # defaults to the lease provision

    @field_validator("period")
    @classmethod
    def valid_period(cls, v):
        if not PERIOD_RE.match(v):
            raise ValueError("La période doit être au format AAAA-MM.")
        return v


class PaymentIn(BaseModel):
    paid_at: date | None = None


class InvoiceResponse(BaseModel):
    id: int
    lease_id: int
    period: str
    kind: str
    rent_amount: float
    charges_amount: float
    fees_ttc: float
    total_amount: float
    status: str
    paid_at: date | None

    model_config = {"from_attributes": True}


def _get_invoice_or_404(invoice_id: int, db: Session) -> Invoice:
    invoice = db.query(Invoice).filter(Invoice.id == invoice_id).first()
    if not invoice:
        raise HTTPException(status_code=404, detail="Facture introuvable.")
    return invoice


@router.get("/", response_model=list[InvoiceResponse])
def list_invoices(
    lease_id: int | None = None,
    status: str | None = None,
    db: Session = Depends(get_db),
):
    q = db.query(Invoice)
    if lease_id:
        q = q.filter(Invoice.lease_id == lease_id)
    if status:
        q = q.filter(Invoice.status == status)
    return q.order_by(Invoice.period).all()


@router.post("/", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
def create_invoice(data: InvoiceCreate, db: Session = Depends(get_db)):
    lease = db.query(Lease).filter(Lease.id == data.lease_id).first()
    if not lease:
        raise HTTPException(status_code=404, detail="Bail introuvable.")
    duplicate = (
        db.query(Invoice)
        .filter(and_(Invoice.lease_id == lease.id, Invoice.period == data.period))
        .first()
    )
    if duplicate:
        raise HTTPException(status_code=409, detail=f"Une facture existe déjà pour {data.period}.")

    rent = Decimal(str(data.rent_amount if data.rent_amount is not None else lease.rent_amount))
    charges = Decimal(str(data.charges_amount if data.charges_amount is not None else lease.charges_amount))
    year = int(data.period[:4])
    fees = compute_fees(rent, resolve_fee_rate(lease.property.fee_rate_ht, year), lease.property.postal_code)

    invoice = Invoice(
        lease_id=lease.id,
        period=data.period,
        kind="monthly",
        rent_amount=rent,
        charges_amount=charges,
        fees_ttc=fees.total_ttc,
        total_amount=rent + charges,
    )
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(invoice_id: int, db: Session = Depends(get_db)):
    return _get_invoice_or_404(invoice_id, db)


@router.post("/{invoice_id}/pay", response_model=InvoiceResponse)
def pay_invoice(invoice_id: int, data: PaymentIn, db: Session = Depends(get_db)):
    invoice = _get_invoice_or_404(invoice_id, db)
    if invoice.status == "paid":
        raise HTTPException(status_code=409, detail="Facture déjà réglée.")
    invoice.status = "paid"
    invoice.paid_at = data.paid_at or date.today()
    db.commit()
    db.refresh(invoice)
    logger.info("Facture %s réglée le %s", invoice.id, invoice.paid_at.isoformat())
    return invoice


@router.get("/{invoice_id}/remittance")
def invoice_remittance(
    invoice_id: int,
    repair_deductions: float = 0,
    other_deductions: float = 0,
    db: Session = Depends(get_db),
):
    """Amount to transfer to the owner once the invoice has been collected."""
    invoice = _get_invoice_or_404(invoice_id, db)
    if invoice.status != "paid":
        raise HTTPException(status_code=409, detail="La facture n'est pas encore encaissée.")
    lease = invoice.lease
    result = compute_remittance(
        Decimal(str(invoice.rent_amount)),
        Decimal(str(invoice.charges_amount)),
        resolve_fee_rate(lease.property.fee_rate_ht, int(invoice.period[:4])),
        repair_deductions,
        other_deductions,
        lease.property.postal_code,
    )
    return {
        "invoice_id": invoice.id,
        "period": invoice.period,
        "rent_collected": float(result.rent_collected),
        "charges_collected": float(result.charges_collected),
        "fees_ttc": float(result.fees_ttc),
        "repair_deductions": float(result.repair_deductions),
        "other_deductions": float(result.other_deductions),
        "amount_remitted": float(result.amount_remitted),
    }


@router.get("/{invoice_id}/receipt")
def invoice_receipt(invoice_id: int, db: Session = Depends(get_db)):
    invoice = _get_invoice_or_404(invoice_id, db)
    if invoice.status != "paid":
        raise HTTPException(status_code=409, detail="Quittance disponible uniquement pour une facture réglée.")
    lease = invoice.lease
    prop = lease.property
    pdf_bytes = generate_receipt_pdf({
        "owner_name": prop.owner_name,
        "owner_address": prop.owner_address,
        "tenant_name": lease.tenant_name,
        "property_address": prop.address,
        "postal_code": prop.postal_code,
        "city": prop.city,
        "period": invoice.period,
        "rent_amount": invoice.rent_amount,
        "charges_amount": invoice.charges_amount,
        "total_amount": invoice.total_amount,
        "paid_at": invoice.paid_at,
    })
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="quittance_{invoice.period}_{lease.id}.pdf"'},
    )
