"""
Management fees (honoraires de gestion) and owner remittance (reversement).

Intermediate amounts are kept at full precision; only the returned monetary
fields are rounded, each one independently, to the cent (half away from zero).
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from app.core.vat import resolve_vat_rate

DEFAULT_FEE_RATE_HT = Decimal("0.07")
DEFAULT_POSTAL_CODE = "75000"

CENT = Decimal("0.01")


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_amount(value: Decimal) -> Decimal:
    """Round to the cent. Infinite and NaN values are returned unchanged."""
    if not value.is_finite():
        return value
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FeeCalculation:
    gross_rent: Decimal
    fee_rate_ht: Decimal
    fee_amount_ht: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    total_ttc: Decimal
    net_to_owner: Decimal


@dataclass(frozen=True)
class RemittanceCalculation:
    rent_collected: Decimal
    charges_collected: Decimal
    fees_ttc: Decimal
    repair_deductions: Decimal
    other_deductions: Decimal
    amount_remitted: Decimal  # may be negative: the owner owes the agency


def compute_fees(
    gross_rent,
    fee_rate_ht=DEFAULT_FEE_RATE_HT,
    postal_code: str | None = DEFAULT_POSTAL_CODE,
) -> FeeCalculation:
    """
    Compute management fees on a monthly rent (loyer hors charges).

    The TVA rate depends on the property's territory, see app.core.vat.
    Negative rents are not rejected here: validation belongs to the caller.
    Infinite or NaN inputs propagate to the results instead of raising.
    """
    rent = to_decimal(gross_rent)
    rate = to_decimal(fee_rate_ht)
    vat_rate = resolve_vat_rate(postal_code)

    with localcontext() as ctx:
        # Infinity - Infinity and Infinity x 0 give NaN
        ctx.traps[InvalidOperation] = False
        fee_ht = rent * rate
        vat_amount = fee_ht * vat_rate
        total_ttc = fee_ht + vat_amount
        net_to_owner = rent - total_ttc

    return FeeCalculation(
        gross_rent=round_amount(rent),
        fee_rate_ht=rate,
        fee_amount_ht=round_amount(fee_ht),
        vat_rate=vat_rate,
        vat_amount=round_amount(vat_amount),
        total_ttc=round_amount(total_ttc),
        net_to_owner=round_amount(net_to_owner),
    )


def compute_remittance(
    rent_collected,
    charges_collected,
    fee_rate_ht=DEFAULT_FEE_RATE_HT,
    repair_deductions=0,
    other_deductions=0,
    postal_code: str | None = DEFAULT_POSTAL_CODE,
) -> RemittanceCalculation:
    """
    Compute the amount transferred to the owner for one collection:
    rent + charges - fees TTC - repairs - other deductions.
    """
    rent = to_decimal(rent_collected)
    charges = to_decimal(charges_collected)
    repairs = to_decimal(repair_deductions)
    other = to_decimal(other_deductions)

    fees = compute_fees(rent, fee_rate_ht, postal_code)
    with localcontext() as ctx:
        ctx.traps[InvalidOperation] = False
        remitted = rent + charges - fees.total_ttc - repairs - other

    return RemittanceCalculation(
        rent_collected=rent,
        charges_collected=charges,
        fees_ttc=fees.total_ttc,
        repair_deductions=repairs,
        other_deductions=other,
        amount_remitted=round_amount(remitted),
    )
