from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from .schemas import RawContact

_KHZ_PER_MHZ = Decimal(1000)


def contact_field(contact: RawContact, name: str) -> str:
    value = contact.get(name)
    if value is None:
        return ""
    return str(value).strip()


def contacted_callsign(contact: RawContact) -> str:
    return contact_field(contact, "call")


def parse_contact_datetime(date: str, time: str) -> datetime | None:
    """Parse ADIF ``YYYYMMDD`` + ``HHMM[SS]`` into a UTC instant, or ``None``."""
    date = (date or "").strip()
    time = (time or "").strip()
    if len(date) != 8 or not date.isdigit():
        return None
    if len(time) == 4:
        time = f"{time}00"
    if len(time) != 6 or not time.isdigit():
        return None
    try:
        return datetime.strptime(f"{date}{time}", "%Y%m%d%H%M%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def contact_datetime(contact: RawContact) -> datetime | None:
    return parse_contact_datetime(
        contact_field(contact, "qso_date"),
        contact_field(contact, "time_on"),
    )


def minutes_between(first: datetime, second: datetime) -> float:
    return abs((first - second).total_seconds()) / 60


def parse_frequency(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    if not text:
        return None
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        return None
    if not parsed.is_finite():
        return None
    return parsed


def frequencies_within_tolerance(first: Any, second: Any, tolerance_khz: float) -> bool:
    """Compare two MHz frequencies against a kHz tolerance using exact decimals."""
    first_mhz = parse_frequency(first)
    second_mhz = parse_frequency(second)
    if first_mhz is None or second_mhz is None:
        return False
    difference_khz = abs(first_mhz - second_mhz) * _KHZ_PER_MHZ
    return difference_khz <= Decimal(str(tolerance_khz))
