"""Tests for Money and ISO 4217 currency parsing."""

from __future__ import annotations

from decimal import Decimal

import pytest

from oblctl.domain.errors import CurrencyFormatError, CurrencyMismatchError
from oblctl.domain.money import MINOR_UNITS_PER_MAJOR, Money, parse_currency


class TestParseCurrency:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("USD", "USD"), ("gbp", "GBP"), (" eur ", "EUR"), ("Chf", "CHF")],
    )
    def test_known_codes(self, raw: str, expected: str) -> None:
        assert parse_currency(raw) == expected

    @pytest.mark.parametrize("raw", ["QQQ", "US", "USDX", "U5D", "", "   "])
    def test_rejects_unknown_or_malformed(self, raw: str) -> None:
        with pytest.raises(CurrencyFormatError) as exc_info:
            parse_currency(raw)
        assert exc_info.value.code == "INVALID_CURRENCY"
        assert exc_info.value.client_error is True

    def test_error_message_names_the_input(self) -> None:
        with pytest.raises(CurrencyFormatError, match="QQQ"):
            parse_currency("QQQ")


class TestMoney:
    def test_of_major_scales_to_minor_units(self) -> None:
        money = Money.of_major(5, "USD")
        assert money.quantity == 5 * MINOR_UNITS_PER_MAJOR == 500
        assert money.currency == "USD"

    def test_zero(self) -> None:
        assert Money.zero("EUR") == Money(0, "EUR")

    def test_addition_and_subtraction(self) -> None:
        assert Money(250, "USD") + Money(50, "USD") == Money(300, "USD")
        assert Money(250, "USD") - Money(50, "USD") == Money(200, "USD")

    def test_mixed_currency_arithmetic_raises(self) -> None:
        with pytest.raises(CurrencyMismatchError):
            _ = Money(1, "USD") + Money(1, "GBP")
        with pytest.raises(CurrencyMismatchError):
            _ = Money(1, "USD") - Money(1, "GBP")

    def test_adding_a_non_money_is_a_type_error(self) -> None:
        with pytest.raises(TypeError):
            _ = Money(1, "USD") + 1  # type: ignore[operator]

    @pytest.mark.parametrize("quantity", [1.5, "100", True, None])
    def test_quantity_must_be_int(self, quantity: object) -> None:
        with pytest.raises(TypeError):
            Money(quantity, "USD")  # type: ignore[arg-type]

    def test_to_decimal(self) -> None:
        assert Money(1234, "GBP").to_decimal() == Decimal("12.34")

    def test_str(self) -> None:
        assert str(Money(500, "USD")) == "5.00 USD"
        assert str(Money(7, "EUR")) == "0.07 EUR"

    def test_str_uses_hundredths_for_every_currency(self) -> None:
        assert str(Money.of_major(5, "JPY")) == "5.00 JPY"
        assert str(Money.of_major(5, "BHD")) == "5.00 BHD"

    def test_value_equality_and_hash(self) -> None:
        assert Money(10, "USD") == Money(10, "USD")
        assert len({Money(10, "USD"), Money(10, "USD"), Money(10, "GBP")}) == 2
