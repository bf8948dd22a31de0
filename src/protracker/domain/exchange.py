"""Currency exchange rates."""

import logging
from decimal import Decimal
from typing import Iterable

from protracker.domain.entities import ExchangeRate, WorkingSet
from protracker.domain.errors import ValidationError

logger = logging.getLogger(__name__)


def update_exchange_rate(working_set: WorkingSet, rate: ExchangeRate) -> None:
    """Insert a rate, replacing any existing rate for the same currency pair.

    Raises:
        ValidationError: If the rate is not positive
    """
    if rate.rate <= 0:
        raise ValidationError(f"Exchange rate must be positive (got {rate.rate})")
    for index, existing in enumerate(working_set.exchange_rates):
        if (existing.from_currency, existing.to_currency) == (rate.from_currency, rate.to_currency):
            working_set.exchange_rates[index] = rate
            return
    working_set.exchange_rates.append(rate)


def convert_currency(
    rates: Iterable[ExchangeRate], amount: Decimal, from_currency: str, to_currency: str
) -> Decimal:
    """Convert amount between currencies.

    Returns the amount unchanged when the currencies match or no rate is
    known for the pair.
    """
    if from_currency == to_currency:
        return amount
    for rate in rates:
        if rate.from_currency == from_currency and rate.to_currency == to_currency:
            return amount * rate.rate
    logger.warning("Exchange rate not found for %s to %s", from_currency, to_currency)
    return amount
