"""
Lease termination: status update followed by the final accounting documents.

The steps commit one by one and are chained through the saga runner, so that a
failure on the final invoice or the regularisation puts the lease back in its
previous state.
"""
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.fees import compute_fees, round_amount
from app.core.lease_status import apply_transition
from app.core.prorata import month_prorata
from app.core.regularisation import ChargeLine
from app.core.saga import SagaResult, SagaStep, run_saga
from app.models.invoice import Invoice
from app.models.lease import Lease
from app.models.regularisation import ChargeRegularisation
from app.services.regularisation import regularise_lease, to_record
from app.utils.constants_loader import resolve_fee_rate

logger = logging.getLogger(__name__)


@dataclass
class TerminationContext:
    db: Session
    lease: Lease
    termination_date: date
    charges: list[ChargeLine] = field(default_factory=list)


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def _terminate(ctx: TerminationContext) -> dict:
    lease = ctx.lease
    previous = {"status": lease.status, "end_date": lease.end_date}
    lease.status = apply_transition("TERMINATE", lease.status)
    lease.end_date = ctx.termination_date
    _commit(ctx.db)
    return previous


def _restore(ctx: TerminationContext, previous: dict) -> None:
    ctx.lease.status = previous["status"]
    ctx.lease.end_date = previous["end_date"]
    _commit(ctx.db)


def _create_final_invoice(ctx: TerminationContext) -> int:
    lease = ctx.lease
    period = ctx.termination_date.strftime("%Y-%m")
    ratio = month_prorata(period, lease.start_date, ctx.termination_date)

    rent = round_amount(Decimal(str(lease.rent_amount)) * ratio)
    charges = round_amount(Decimal(str(lease.charges_amount or 0)) * ratio)

    # A month already billed in full: the final invoice only carries the
    # difference, negative for the days after the termination (avoir).
    billed = (
        ctx.db.query(Invoice)
        .filter(and_(Invoice.lease_id == lease.id, Invoice.period == period, Invoice.kind == "monthly"))
        .all()
    )
    for monthly in billed:
        rent -= Decimal(str(monthly.rent_amount))
        charges -= Decimal(str(monthly.charges_amount))
    if billed:
        logger.info("Bail %s : %s déjà facturé, facture de solde de %s", lease.id, period, rent + charges)

    fee_rate = resolve_fee_rate(lease.property.fee_rate_ht, ctx.termination_date.year)
    fees = compute_fees(rent, fee_rate, lease.property.postal_code)

    invoice = Invoice(
        lease_id=lease.id,
        period=period,
        kind="final",
        rent_amount=rent,
        charges_amount=charges,
        fees_ttc=fees.total_ttc,
        total_amount=rent + charges,
    )
    ctx.db.add(invoice)
    _commit(ctx.db)
    return invoice.id


def _delete_invoice(ctx: TerminationContext, invoice_id: int) -> None:
    invoice = ctx.db.get(Invoice, invoice_id)
    if invoice is not None:
        ctx.db.delete(invoice)
        _commit(ctx.db)


def _record_regularisation(ctx: TerminationContext) -> int:
    year = ctx.termination_date.year
    result = regularise_lease(ctx.db, ctx.lease, year, ctx.charges, until=ctx.termination_date)
    record = to_record(ctx.lease.id, result)
    ctx.db.add(record)
    _commit(ctx.db)
    return record.id


def _delete_regularisation(ctx: TerminationContext, record_id: int) -> None:
    record = ctx.db.get(ChargeRegularisation, record_id)
    if record is not None:
        ctx.db.delete(record)
        _commit(ctx.db)


def termination_steps(with_regularisation: bool) -> list[SagaStep]:
    steps = [
        SagaStep("terminate_lease", _terminate, _restore),
        SagaStep("create_final_invoice", _create_final_invoice, _delete_invoice),
    ]
    if with_regularisation:
        steps.append(SagaStep("record_charge_regularisation", _record_regularisation, _delete_regularisation))
    return steps


def terminate_lease(
    db: Session,
    lease: Lease,
    termination_date: date,
    charges: list[ChargeLine] | None = None,
) -> SagaResult:
    """
    Terminate `lease` on `termination_date`, issue the prorated final invoice and,
    when real charges are given, record the charges regularisation of that year.
    """
    ctx = TerminationContext(db=db, lease=lease, termination_date=termination_date, charges=charges or [])
    logger.info("Résiliation du bail %s au %s", lease.id, termination_date.isoformat())
    result = run_saga(termination_steps(bool(ctx.charges)), ctx)
    if not result.success:
        logger.warning(
            "Résiliation du bail %s annulée (étape %s) : %s", lease.id, result.failed_step, result.error
        )
    return result
