"""
Topology validation and capacity arithmetic for tenant zones.

Pure functions only: nothing here talks to the orchestrator.
"""

import re
from decimal import ROUND_CEILING, Decimal
from typing import Iterable

from console.errors import ValidationErrorKind, ZoneValidationError
from console.models import ZoneSpec

_BINARY_SUFFIXES = {
    "Ki": 2 ** 10,
    "Mi": 2 ** 20,
    "Gi": 2 ** 30,
    "Ti": 2 ** 40,
    "Pi": 2 ** 50,
    "Ei": 2 ** 60,
}
_DECIMAL_SUFFIXES = {
    "": 1,
    "k": 10 ** 3,
    "M": 10 ** 6,
    "G": 10 ** 9,
    "T": 10 ** 12,
    "P": 10 ** 15,
    "E": 10 ** 18,
}
_QUANTITY_RE = re.compile(r"^([0-9]+(?:\.[0-9]+)?)(?:[eE]([+-]?[0-9]+))?([a-zA-Z]*)$")


# ============================================================================
# VALIDATION
# ============================================================================

def validate_zone(zone: ZoneSpec) -> None:
    """
    Check a proposed zone against the topology rules.

    Rules are checked in a fixed order and the first violation is raised:
    1. volume capacity must be a positive byte count
    2. server count must be > 0
    3. volumes-per-server must be > 0

    Raises:
        ZoneValidationError: with the kind of the first violated rule
    """
    if zone.volume_bytes is None or zone.volume_bytes <= 0:
        raise ZoneValidationError(
            ValidationErrorKind.INVALID_CAPACITY,
            f"Zone '{zone.name}': volume size must be greater than 0",
        )
    if zone.servers <= 0:
        raise ZoneValidationError(
            ValidationErrorKind.INVALID_SERVER_COUNT,
            f"Zone '{zone.name}': servers must be greater than 0",
        )
    if zone.volumes_per_server <= 0:
        raise ZoneValidationError(
            ValidationErrorKind.INVALID_VOLUME_COUNT,
            f"Zone '{zone.name}': volumes per server must be greater than 0",
        )


# ============================================================================
# CAPACITY
# ============================================================================

def zone_bytes(zone: ZoneSpec) -> int:
    return zone.servers * zone.volumes_per_server * (zone.volume_bytes or 0)


def total_bytes(zones: Iterable[ZoneSpec]) -> int:
    """Aggregate raw capacity of all zones (Python ints never wrap)."""
    return sum(zone_bytes(zone) for zone in zones)


def parse_quantity(raw) -> int:
    """Convert an orchestrator storage quantity ("1Mi", "2G", "1e6", "1024") to bytes."""
    if isinstance(raw, int):
        return raw
    text = str(raw or "").strip()
    match = _QUANTITY_RE.match(text)
    if not match:
        raise ValueError(f"Invalid storage quantity: {raw!r}")
    number, exponent, suffix = match.groups()
    if exponent is not None:
        # An exponent quantity carries no unit suffix
        if suffix:
            raise ValueError(f"Invalid storage quantity: {raw!r}")
        multiplier = None
    elif suffix in _BINARY_SUFFIXES:
        multiplier = _BINARY_SUFFIXES[suffix]
    elif suffix in _DECIMAL_SUFFIXES:
        multiplier = _DECIMAL_SUFFIXES[suffix]
    else:
        raise ValueError(f"Unknown storage quantity suffix: {suffix!r}")
    try:
        if multiplier is None:
            value = Decimal(number).scaleb(int(exponent))
        else:
            value = Decimal(number) * multiplier
    except ArithmeticError as e:
        raise ValueError(f"Invalid storage quantity: {raw!r}") from e
    # Fractional bytes round up, as the orchestrator does
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def format_quantity(size_bytes: int) -> str:
    return str(int(size_bytes))
