import logging
import os
from decimal import Decimal
from pathlib import Path

import yaml

from app.core.fees import DEFAULT_FEE_RATE_HT

logger = logging.getLogger(__name__)

_DEFAULT_PATH = Path(__file__).resolve().parents[3] / "rental_constants"


def _constants_path() -> Path:
    """Read RENTAL_CONSTANTS_PATH at call time (supports env var changes in tests)."""
    return Path(os.getenv("RENTAL_CONSTANTS_PATH", str(_DEFAULT_PATH)))


# Use a simple dict cache keyed by (year, path) to support test env var overrides
_cache: dict[tuple, dict] = {}


def load_rental_constants(year: int) -> dict:
    """
    Load rental constants for the given year. A missing year falls back to the
    latest earlier file, or to the earliest file for years before the first one.
    """
    path = _constants_path()
    cache_key = (year, str(path))
    if cache_key in _cache:
        return _cache[cache_key]

    target = path / f"{year}.yaml"
    if target.exists():
        with open(target) as f:
            result = yaml.safe_load(f)
            _cache[cache_key] = result
            return result

    # Fallback: the most recent year <= requested year, else the earliest file
    available = sorted(int(p.stem) for p in path.glob("*.yaml") if p.stem.isdigit())
    if available:
        earlier = [y for y in available if y <= year]
        y = earlier[-1] if earlier else available[0]
        logger.info("Constantes %s absentes, utilisation de %s", year, y)
        with open(path / f"{y}.yaml") as f:
            result = yaml.safe_load(f) or {}
            _cache[cache_key] = result
            return result

    raise FileNotFoundError(f"No rental constants found for year {year} in {path}")


def get_default_fee_rate(year: int) -> Decimal:
    try:
        fees = load_rental_constants(year).get("management_fees", {})
    except FileNotFoundError:
        logger.warning("Aucune constante pour %s, taux d'honoraires par défaut %s", year, DEFAULT_FEE_RATE_HT)
        return DEFAULT_FEE_RATE_HT
    return Decimal(str(fees.get("default_rate_ht", DEFAULT_FEE_RATE_HT)))


def get_recoverable_charges(year: int) -> dict:
    return load_rental_constants(year).get("recoverable_charges", {})


def resolve_fee_rate(negotiated_rate, year: int) -> Decimal:
    """Fee rate negotiated in the management mandate, else the default rate of the year."""
    if negotiated_rate is not None:
        return Decimal(str(negotiated_rate))
    return get_default_fee_rate(year)
