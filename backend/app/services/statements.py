"""
Owner management statement (compte rendu de gestion, CRG) and tenant account
situation, both built from the invoices stored for a property or a lease.

Each paid invoice gives three movements on the owner account: the collected
rent and charges (credit), the management fees TTC (debit) and the transfer to
the owner (debit), the last two coming from compute_remittance.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.fees import compute_remittance, round_amount, to_decimal
from app.models.invoice import Invoice
from app.models.lease import Lease
from app.models.property import Property
from app.utils.constants_loader import resolve_fee_rate
from app.utils.pdf_generator import period_label

logger = logging.getLogger(__name__)

CREDIT = "credit"
DEBIT = "debit"

SITUATION_HISTORY_MONTHS = 12


class StatementError(ValueError):
    pass


@dataclass
class Movement:
    value_date: date
    reference: str
    label: str
    type: str  # credit | debit
    category: str  # loyer | honoraires | reversement
    amount: Decimal
    invoice_id: int
    running_balance: Decimal = Decimal("0")

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.type == CREDIT else -self.amount


@dataclass
class OwnerStatement:
    property_id: int
    start: date
    end: date
    opening_balance: Decimal
    movements: list[Movement] = field(default_factory=list)
    total_credits: Decimal = Decimal("0")
    total_debits: Decimal = Decimal("0")
    closing_balance: Decimal = Decimal("0")
    collected: Decimal = Decimal("0")
    fees_ttc: Decimal = Decimal("0")
    amount_remitted: Decimal = Decimal("0")


@dataclass
class SituationLine:
    period: str
    kind: str
    amount_called: Decimal
    amount_paid: Decimal
    balance: Decimal
    status: str  # solde | impaye
    paid_at: date | None


@dataclass
class TenantSituation:
    lease_id: int
    as_of: date
    months_elapsed: int
    lines: list[SituationLine]
    total_called: Decimal
    total_paid: Decimal
    balance_due: Decimal

    @property
    def up_to_date(self) -> bool:
        return self.balance_due <= 0


def _paid_invoices(db: Session, property_id: int, *criteria) -> list[Invoice]:
    return (
        db.query(Invoice)
        .join(Lease, Invoice.lease_id == Lease.id)
        .filter(and_(Lease.property_id == property_id, Invoice.status == "paid", *criteria))
        .order_by(Invoice.period, Invoice.id)
        .all()
    )


def invoice_movements(invoice: Invoice, prop: Property) -> list[Movement]:
    """Owner account movements generated by one paid invoice."""
    remittance = compute_remittance(
        invoice.rent_amount,
        invoice.charges_amount,
        resolve_fee_rate(prop.fee_rate_ht, int(invoice.period[:4])),
        postal_code=prop.postal_code,
    )
    # Rent due on the 5th when the payment date was not recorded
    paid_at = invoice.paid_at or date.fromisoformat(f"{invoice.period}-05")
    label = period_label(invoice.period)
    return [
        Movement(paid_at, f"QT-{invoice.id}", f"Loyer {label}", CREDIT, "loyer",
                 round_amount(to_decimal(invoice.total_amount)), invoice.id),
        Movement(paid_at, f"FA-{invoice.id}", f"Honoraires de gestion {label}", DEBIT, "honoraires",
                 remittance.fees_ttc, invoice.id),
        Movement(paid_at, f"VIR-{invoice.id}", f"Reversement {label}", DEBIT, "reversement",
                 remittance.amount_remitted, invoice.id),
    ]


def owner_statement(db: Session, prop: Property, start: date, end: date) -> OwnerStatement:
    """
    Build the CRG of `prop` for the billing periods between `start` and `end`.

    The opening balance replays every paid invoice of earlier periods; the
    closing balance is opening + credits - debits.
    """
    if end < start:
        raise StatementError("La fin de période précède son début.")
    first, last = start.strftime("%Y-%m"), end.strftime("%Y-%m")

    opening = sum(
        (m.signed_amount for inv in _paid_invoices(db, prop.id, Invoice.period < first)
         for m in invoice_movements(inv, prop)),
        Decimal("0"),
    )
    statement = OwnerStatement(property_id=prop.id, start=start, end=end, opening_balance=round_amount(opening))

    invoices = _paid_invoices(db, prop.id, Invoice.period >= first, Invoice.period <= last)
    movements = [m for inv in invoices for m in invoice_movements(inv, prop)]
    movements.sort(key=lambda m: m.value_date)

    balance = opening
    for m in movements:
        balance += m.signed_amount
        m.running_balance = round_amount(balance)
        if m.type == CREDIT:
            statement.total_credits += m.amount
        else:
            statement.total_debits += m.amount
        if m.category == "loyer":
            statement.collected += m.amount
        elif m.category == "honoraires":
            statement.fees_ttc += m.amount
        else:
            statement.amount_remitted += m.amount

    statement.movements = movements
    statement.closing_balance = round_amount(opening + statement.total_credits - statement.total_debits)
    logger.info(
        "CRG du bien %s (%s → %s) : %s mouvements, solde %s",
        prop.id, first, last, len(movements), statement.closing_balance,
    )
    return statement


def _months_elapsed(start: date, as_of: date) -> int:
    if as_of < start:
        return 0
    return (as_of.year - start.year) * 12 + as_of.month - start.month + 1


def tenant_situation(db: Session, lease: Lease, as_of: date | None = None) -> TenantSituation:
    """Amounts called and paid on the last twelve invoices of `lease` up to `as_of`."""
    as_of = as_of or date.today()
    invoices = (
        db.query(Invoice)
        .filter(and_(Invoice.lease_id == lease.id, Invoice.period <= as_of.strftime("%Y-%m")))
        .order_by(Invoice.period.desc(), Invoice.id.desc())
        .limit(SITUATION_HISTORY_MONTHS)
        .all()
    )

    lines = []
    for inv in invoices:
        called = round_amount(to_decimal(inv.total_amount))
        paid = called if inv.status == "paid" else Decimal("0")
        lines.append(SituationLine(
            period=inv.period,
            kind=inv.kind,
            amount_called=called,
            amount_paid=paid,
            balance=called - paid,
            status="solde" if inv.status == "paid" else "impaye",
            paid_at=inv.paid_at,
        ))

    total_called = sum((line.amount_called for line in lines), Decimal("0"))
    total_paid = sum((line.amount_paid for line in lines), Decimal("0"))
    return TenantSituation(
        lease_id=lease.id,
        as_of=as_of,
        months_elapsed=_months_elapsed(lease.start_date, as_of),
        lines=lines,
        total_called=total_called,
        total_paid=total_paid,
        balance_due=total_called - total_paid,
    )
