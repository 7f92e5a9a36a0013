"""Money value object and ISO 4217 currency parsing.

Quantities are integer minor units (cents). Callers enter whole major
units; :meth:`Money.of_major` scales by :data:`MINOR_UNITS_PER_MAJOR`.
Every currency uses hundredths, whatever its ISO 4217 exponent.

INVARIANT: Amounts in different currencies are never added together.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal

import pycountry

from oblctl.domain.errors import CurrencyFormatError, CurrencyMismatchError

MINOR_UNITS_PER_MAJOR = 100

_CODE_RE = re.compile(r"^[A-Za-z]{3}$")


def parse_currency(code: str) -> str:
    """Validate *code* against ISO 4217 and return it upper-cased.

    Raises:
        CurrencyFormatError: If *code* is not a known alphabetic code.
    """
    candidate = code.strip()
    if not _CODE_RE.match(candidate):
        raise CurrencyFormatError(code)
    candidate = candidate.upper()
    if pycountry.currencies.get(alpha_3=candidate) is None:
        raise CurrencyFormatError(code)
    return candidate


@dataclass(frozen=True, slots=True)
class Money:
    """An integer count of minor units in a single currency."""

    quantity: int
    currency: str

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            msg = f"Money quantity must be an integer, got {self.quantity!r}"
            raise TypeError(msg)

    @classmethod
    def zero(cls, currency: str) -> Money:
        return cls(0, currency)

    @classmethod
    def of_major(cls, amount: int, currency: str) -> Money:
        """Build from whole major units, e.g. ``of_major(5, "USD")`` is 500 cents."""
        return cls(amount * MINOR_UNITS_PER_MAJOR, currency)

    def _check_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(self.quantity + other.quantity, self.currency)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_currency(other)
        return Money(self.quantity - other.quantity, self.currency)

    def to_decimal(self) -> Decimal:
        """Amount in major units."""
        return Decimal(self.quantity).scaleb(-2)

    def __str__(self) -> str:
        return f"{self.to_decimal():.2f} {self.currency}"
