"""Stay price computation in fixed-point decimal."""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from staybook.errors import InvalidRange

CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PriceQuote:
    """Breakdown of a stay's price. Every amount is quantised to cents."""

    nights: int
    nightly_rate: Decimal
    base_amount: Decimal
    service_fee: Decimal
    cleaning_fee: Decimal
    total_amount: Decimal


def count_nights(check_in: date, check_out: date) -> int:
    """Number of nights in ``[check_in, check_out)``; raises ``InvalidRange`` if not positive."""
    if check_out <= check_in:
        raise InvalidRange()
    return (check_out - check_in).days


def quote_price(
    daily_price: Decimal,
    check_in: date,
    check_out: date,
    service_fee_rate: Decimal,
    cleaning_fee: Decimal,
) -> PriceQuote:
    """Compute ``nights * daily_price`` plus the service fee and the fixed cleaning fee.

    >>> quote_price(Decimal("150.00"), date(2023, 6, 1), date(2023, 6, 3), Decimal("0.10"), Decimal("0")).total_amount
    Decimal('330.00')
    """
    nights = count_nights(check_in, check_out)
    nightly_rate = _money(Decimal(daily_price))
    base_amount = _money(nightly_rate * nights)
    service_fee = _money(base_amount * Decimal(service_fee_rate))
    cleaning = _money(Decimal(cleaning_fee))
    return PriceQuote(
        nights=nights,
        nightly_rate=nightly_rate,
        base_amount=base_amount,
        service_fee=service_fee,
        cleaning_fee=cleaning,
        total_amount=base_amount + service_fee + cleaning,
    )
