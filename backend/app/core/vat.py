"""
TVA rates by French territory.
Reference: CGI art. 278 (métropole), art. 296 (Guadeloupe, Martinique, Réunion),
art. 294 (Guyane, Mayotte: TVA non applicable).
"""
from decimal import Decimal
from enum import Enum


class Territory(str, Enum):
    METROPOLE = "metropole"
    ANTILLES = "antilles"
    GUYANE = "guyane"
    REUNION = "reunion"
    MAYOTTE = "mayotte"


VAT_RATES: dict[Territory, Decimal] = {
    Territory.METROPOLE: Decimal("0.20"),
    Territory.ANTILLES: Decimal("0.085"),
    Territory.REUNION: Decimal("0.085"),
    Territory.GUYANE: Decimal("0"),
    Territory.MAYOTTE: Decimal("0"),
}

# 3-digit postal prefix → DROM
_DROM_PREFIXES: dict[str, Territory] = {
    "971": Territory.ANTILLES,  # Guadeloupe
    "972": Territory.ANTILLES,  # Martinique
    "973": Territory.GUYANE,
    "974": Territory.REUNION,
    "976": Territory.MAYOTTE,
}


def territory_for_postal_code(postal_code: str | None) -> Territory:
    if not postal_code:
        return Territory.METROPOLE
    return _DROM_PREFIXES.get(postal_code[:3], Territory.METROPOLE)


def resolve_vat_rate(postal_code: str | None) -> Decimal:
    """Return the TVA rate applicable to fees for a property located at postal_code."""
    return VAT_RATES[territory_for_postal_code(postal_code)]
