"""
Annual regularisation of recoverable charges (régularisation des charges).
Reference: loi n°89-462 art. 23, décret n°87-713 (charges récupérables).

Provisions paid by the tenant are compared to the tenant's share of the real
charges, prorated on the occupancy of the year.
"""
from dataclasses import dataclass, field
from decimal import Decimal

from app.core.fees import round_amount, to_decimal
from app.core.prorata import ProrataResult


class RegularisationError(ValueError):
    """The regularisation cannot be computed for this lease / year."""


@dataclass(frozen=True)
class ChargeLine:
    type: str
    label: str
    total_amount: Decimal
    quote_part: Decimal = Decimal("100")  # % of the charge borne by the unit


@dataclass(frozen=True)
class ChargeShare:
    type: str
    label: str
    total_amount: Decimal
    quote_part: Decimal
    prorata: Decimal
    amount_due: Decimal


@dataclass
class RegularisationResult:
    year: int
    provisions_collected: Decimal
    total_real_charges: Decimal
    balance: Decimal  # > 0: refund the tenant, < 0: extra to invoice
    type: str  # 'credit' | 'debit'
    prorata: ProrataResult
    charges: list[ChargeShare] = field(default_factory=list)


def compute_regularisation(
    year: int,
    provisions: list,
    charges: list[ChargeLine],
    prorata: ProrataResult,
) -> RegularisationResult:
    if prorata.occupied_days <= 0:
        raise RegularisationError("Le locataire n'a pas occupé le logement sur cette période.")

    shares = []
    for charge in charges:
        quote_part = to_decimal(charge.quote_part) if charge.quote_part else Decimal("100")
        due = to_decimal(charge.total_amount) * prorata.ratio * quote_part / Decimal("100")
        shares.append(
            ChargeShare(
                type=charge.type,
                label=charge.label,
                total_amount=to_decimal(charge.total_amount),
                quote_part=quote_part,
                prorata=prorata.ratio,
                amount_due=round_amount(due),
            )
        )

    provisions_total = sum((to_decimal(p) for p in provisions), Decimal("0"))
    charges_total = sum((s.amount_due for s in shares), Decimal("0"))
    balance = provisions_total - charges_total

    return RegularisationResult(
        year=year,
        provisions_collected=round_amount(provisions_total),
        total_real_charges=round_amount(charges_total),
        balance=round_amount(balance),
        type="credit" if balance >= 0 else "debit",
        prorata=prorata,
        charges=shares,
    )
