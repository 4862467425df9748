"""
Derived registration state: age brackets, session prices and the single
recompute step that keeps a child's form entry consistent.

Everything here is pure. Callers pass `today` explicitly when they need a
stable reference date (tests, quotes rendered for a given day).
"""
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

SESSION_HALF = "half"
SESSION_FULL = "full"
SESSION_CHOICES = (SESSION_HALF, SESSION_FULL)
DEFAULT_SESSION = SESSION_FULL

# (label, inclusive upper age); ordered youngest first, the last one open-ended
AGE_BRACKETS = (
    ("3-below", 3),
    ("4-6", 6),
    ("7-10", 10),
    ("11-13", 13),
    ("14-17", 17),
    ("18+", None),
)
AGE_RANGES = tuple(label for label, _ in AGE_BRACKETS)


class PricingMode:
    SESSION = "session"
    FLAT = "flat"


@dataclass(frozen=True)
class SessionRates:
    half: Decimal
    full: Decimal

    def rate_for(self, session):
        if session == SESSION_HALF:
            return Decimal(self.half)
        if session == SESSION_FULL:
            return Decimal(self.full)
        raise ValueError(f"Unknown session type: {session!r}")


def _as_date(value):
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def calculate_age(date_of_birth, today=None):
    today = today or date.today()
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def age_range_for(date_of_birth, today=None):
    """Bracket label for a birth date, or None when no birth date is known."""
    dob = _as_date(date_of_birth)
    if dob is None:
        return None
    age = calculate_age(dob, today)
    for label, upper in AGE_BRACKETS:
        if upper is None or age <= upper:
            return label


def calculate_child_price(sessions, rates):
    return sum((rates.rate_for(session) for session in sessions), Decimal("0"))


def calculate_flat_price(day_count, rate):
    return Decimal(rate) * max(int(day_count or 0), 0)


def resize_sessions(sessions, number_of_days, default=DEFAULT_SESSION):
    """Grow with `default` entries or truncate, keeping the existing prefix."""
    sessions = list(sessions or [])
    number_of_days = max(int(number_of_days), 0)
    if len(sessions) >= number_of_days:
        return sessions[:number_of_days]
    return sessions + [default] * (number_of_days - len(sessions))


def map_days_to_dates(start_date, number_of_days):
    start = _as_date(start_date)
    if start is None:
        return []
    return [(start + timedelta(days=i)).isoformat() for i in range(number_of_days)]


def sync_child(child, rates, today=None, pricing_mode=PricingMode.SESSION, start_date=None):
    """
    Recompute a child's derived fields from the fields the parent edits.

    Keyed on (number_of_days, selected_sessions, rates). The session list is
    resized before the price is computed, so the price always reflects the
    final list. Returns a new dict.
    """
    synced = dict(child)

    sessions = list(synced.get("selected_sessions") or [])
    number_of_days = synced.get("number_of_days")
    if number_of_days is None:
        number_of_days = len(sessions)
    sessions = resize_sessions(sessions, number_of_days)
    synced["number_of_days"] = number_of_days
    synced["selected_sessions"] = sessions

    dates = map_days_to_dates(start_date, number_of_days)
    if dates:
        synced["selected_dates"] = dates
    else:
        synced.setdefault("selected_dates", [])

    derived_age = age_range_for(synced.get("date_of_birth"), today)
    if derived_age is not None:
        synced["age_range"] = derived_age

    if pricing_mode == PricingMode.FLAT:
        synced["price"] = calculate_flat_price(number_of_days, rates.full)
    else:
        synced["price"] = calculate_child_price(sessions, rates)
    return synced


def sync_registration(children, rates, today=None, pricing_mode=PricingMode.SESSION, start_date=None):
    """Sync every child; returns (children, total) with total == sum of child prices."""
    synced = [
        sync_child(child, rates, today=today, pricing_mode=pricing_mode, start_date=start_date)
        for child in children
    ]
    total = sum((child["price"] for child in synced), Decimal("0"))
    return synced, total
