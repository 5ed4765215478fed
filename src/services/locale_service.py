"""Locale-aware formatting of amounts for statements.

Uses babel for currency and number formatting.

Configuration:
    LOCALE env var (default: en_KE) - determines currency, number formatting

Example:
    >>> from src.services.locale_service import format_amount, format_balance
    >>> format_amount(1234.5)
    'Ksh\xa01,234.50'
    >>> format_balance(Decimal("-500"))
    'Ksh\xa0500.00 Cr'
"""

import logging
import os
from datetime import date
from decimal import Decimal

from babel import Locale, UnknownLocaleError
from babel.dates import format_date as babel_format_date
from babel.numbers import (
    format_currency as babel_format_currency,
)
from babel.numbers import (
    format_decimal as babel_format_decimal,
)
from babel.numbers import (
    get_territory_currencies,
)

logger = logging.getLogger(__name__)

# Default locale if LOCALE env var is invalid or missing
DEFAULT_LOCALE = "en_KE"
DEFAULT_CURRENCY = "KES"


def _get_locale() -> str:
    """Get locale from environment with validation and fallback.

    Returns:
        Valid locale string (e.g., 'en_KE')
    """
    locale_str = os.getenv("LOCALE", DEFAULT_LOCALE)
    try:
        Locale.parse(locale_str)
        return locale_str
    except (UnknownLocaleError, ValueError) as e:
        logger.warning("Invalid LOCALE '%s': %s. Falling back to '%s'", locale_str, e, DEFAULT_LOCALE)
        return DEFAULT_LOCALE


def _get_currency_from_locale(locale_str: str) -> str:
    """Derive currency code from locale territory.

    Args:
        locale_str: Locale string (e.g., 'en_KE')

    Returns:
        Currency code (e.g., 'KES')
    """
    try:
        locale = Locale.parse(locale_str)
        if locale.territory:
            currencies = get_territory_currencies(locale.territory)
            if currencies:
                return currencies[0]
    except (UnknownLocaleError, ValueError) as e:
        logger.warning("Could not derive currency from locale '%s': %s", locale_str, e)

    return DEFAULT_CURRENCY


# Module-level constants (computed once at import)
LOCALE = _get_locale()
CURRENCY = _get_currency_from_locale(LOCALE)


def format_amount(amount: float | Decimal, include_symbol: bool = True) -> str:
    """Format monetary amount according to locale.

    Args:
        amount: Numeric amount to format
        include_symbol: Whether to include currency symbol (default True)

    Returns:
        Formatted currency string (e.g., 'Ksh 1,234.50')
    """
    if include_symbol:
        return babel_format_currency(Decimal(str(amount)), CURRENCY, locale=LOCALE)
    return babel_format_decimal(Decimal(str(amount)), format="#,##0.00", locale=LOCALE)


def format_balance(balance: Decimal) -> str:
    """Format a running balance, marking credit with a trailing 'Cr'.

    Positive balances are owed by the resident and print as a plain amount.
    """
    if balance < 0:
        return f"{format_amount(abs(balance))} Cr"
    return format_amount(balance)


def format_statement_date(value: date) -> str:
    """Format a statement date in the locale's medium style (e.g. '15 Feb 2024')."""
    return babel_format_date(value, format="medium", locale=LOCALE)


__all__ = [
    "LOCALE",
    "CURRENCY",
    "format_amount",
    "format_balance",
    "format_statement_date",
]
