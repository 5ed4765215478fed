"""Calendar-month helpers shared by the ledger and statement services."""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Iterator

logger = logging.getLogger(__name__)

ZERO = Decimal(0)

# Handover on or before this day of the month bills service charge from the next month
HANDOVER_CUTOFF_DAY = 10


def to_decimal(value) -> Decimal:
    """Coerce an optional amount to Decimal, treating None as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def as_date(value) -> date | None:
    """Normalize a date-like value (date, datetime or ISO string) to a date.

    Returns None for missing or unparseable values.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            logger.debug("Ignoring unparseable date %r", value)
            return None
    return None


def month_start(value: date) -> date:
    """First day of the month containing ``value``."""
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """First day of the month ``months`` after the month containing ``value``."""
    index = value.year * 12 + (value.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def iter_months(start: date, end: date) -> Iterator[date]:
    """Yield the first day of every month from ``start`` through ``end`` inclusive."""
    current = month_start(start)
    last = month_start(end)
    while current <= last:
        yield current
        current = add_months(current, 1)


def parse_month(value: str | None) -> date | None:
    """Parse a ``YYYY-MM`` billing-month tag into the first day of that month."""
    if not value:
        return None
    try:
        year, month = value.strip().split("-")[:2]
        return date(int(year), int(month), 1)
    except ValueError:
        logger.debug("Ignoring malformed month tag %r", value)
        return None


def month_key(value: date) -> str:
    """``YYYY-MM`` tag for the month containing ``value``."""
    return value.strftime("%Y-%m")


def month_label(value: date) -> str:
    """Short display label for a month, e.g. ``Jan 2024``."""
    return value.strftime("%b %Y")


def first_billable_month(handover_date: date) -> date:
    """First month a handed-over unit is billed service charge.

    Handover on or before the 10th waives the rest of that month; a later handover
    also waives the following month.
    """
    if handover_date.day <= HANDOVER_CUTOFF_DAY:
        return add_months(handover_date, 1)
    return add_months(handover_date, 2)
