"""Unit tests for stay price computation."""

from datetime import date
from decimal import Decimal

import pytest

from staybook.errors import InvalidRange
from staybook.services.pricing import count_nights, quote_price

CLEANING = Decimal("25000.00")
RATE = Decimal("0.10")


class TestCountNights:
    def test_two_nights(self):
        assert count_nights(date(2023, 6, 1), date(2023, 6, 3)) == 2

    def test_across_month_end(self):
        assert count_nights(date(2023, 6, 29), date(2023, 7, 2)) == 3

    @pytest.mark.parametrize("check_out", [date(2023, 6, 1), date(2023, 5, 31)])
    def test_non_positive_range_rejected(self, check_out):
        with pytest.raises(InvalidRange):
            count_nights(date(2023, 6, 1), check_out)


class TestQuotePrice:
    def test_two_nights_at_150(self):
        quote = quote_price(Decimal("150.00"), date(2023, 6, 1), date(2023, 6, 3), RATE, CLEANING)
        assert quote.nights == 2
        assert quote.base_amount == Decimal("300.00")
        assert quote.service_fee == Decimal("30.00")
        assert quote.cleaning_fee == CLEANING
        assert quote.total_amount == Decimal("300.00") + Decimal("30.00") + CLEANING

    def test_five_nights_at_200(self):
        quote = quote_price(Decimal("200"), date(2023, 6, 10), date(2023, 6, 15), RATE, CLEANING)
        assert quote.base_amount == Decimal("1000.00")
        assert quote.service_fee == Decimal("100.00")
        assert quote.total_amount == Decimal("1000.00") + Decimal("100.00") + CLEANING

    def test_repeated_calls_are_identical(self):
        quotes = {
            quote_price(Decimal("33.33"), date(2023, 1, 1), date(2023, 1, 4), RATE, Decimal("0")) for _ in range(50)
        }
        assert len(quotes) == 1

    def test_service_fee_rounds_half_up_to_cents(self):
        # 3 * 33.35 = 100.05, 10% = 10.005 -> 10.01
        quote = quote_price(Decimal("33.35"), date(2023, 1, 1), date(2023, 1, 4), RATE, Decimal("0"))
        assert quote.service_fee == Decimal("10.01")
        assert quote.total_amount == Decimal("110.06")

    def test_amounts_have_two_decimal_places(self):
        quote = quote_price(Decimal("99.9"), date(2023, 1, 1), date(2023, 1, 2), RATE, Decimal("5"))
        for amount in (quote.nightly_rate, quote.base_amount, quote.service_fee, quote.cleaning_fee, quote.total_amount):
            assert amount.as_tuple().exponent == -2

    def test_invalid_range(self):
        with pytest.raises(InvalidRange):
            quote_price(Decimal("150"), date(2023, 6, 3), date(2023, 6, 1), RATE, CLEANING)
