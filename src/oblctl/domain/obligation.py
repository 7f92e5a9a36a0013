"""Obligation entity — one debt record on the ledger.

An obligation states that ``borrower`` owes ``lender`` an ``amount``, of
which ``paid`` has been repaid so far. Every transformation returns a
new value; the ledger supersedes the old record with the new version
under the same ``linear_id``.

INVARIANT: ``amount`` and ``paid`` share a currency.
INVARIANT: Two obligations are the same entity iff their ``linear_id`` matches.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace

from oblctl.domain.errors import CurrencyMismatchError
from oblctl.domain.identity import NULL_PARTY, AbstractParty, display_name
from oblctl.domain.money import Money


@dataclass(frozen=True, slots=True)
class UniqueIdentifier:
    """Stable identifier for a linear state, with an optional external reference."""

    id: uuid.UUID = field(default_factory=uuid.uuid4)
    external_id: str | None = None

    @classmethod
    def parse(cls, text: str) -> UniqueIdentifier:
        """Parse ``<uuid>`` or ``<external>_<uuid>``."""
        external, sep, raw = text.rpartition("_")
        return cls(id=uuid.UUID(raw), external_id=external if sep else None)

    def __str__(self) -> str:
        if self.external_id:
            return f"{self.external_id}_{self.id}"
        return str(self.id)


@dataclass(frozen=True, slots=True)
class Obligation:
    """Immutable debt record between two parties."""

    amount: Money
    lender: AbstractParty
    borrower: AbstractParty
    paid: Money
    linear_id: UniqueIdentifier = field(default_factory=UniqueIdentifier)

    def __post_init__(self) -> None:
        if self.paid.currency != self.amount.currency:
            raise CurrencyMismatchError(self.amount.currency, self.paid.currency)

    @classmethod
    def create(
        cls,
        amount: Money,
        lender: AbstractParty,
        borrower: AbstractParty,
        *,
        paid: Money | None = None,
    ) -> Obligation:
        """New obligation with a fresh linear id; ``paid`` defaults to zero."""
        if paid is None:
            paid = Money.zero(amount.currency)
        return cls(amount, lender, borrower, paid)

    @property
    def participants(self) -> tuple[AbstractParty, AbstractParty]:
        return (self.lender, self.borrower)

    @property
    def outstanding(self) -> Money:
        """Amount still owed."""
        return self.amount - self.paid

    def pay(self, amount_to_pay: Money) -> Obligation:
        """Return a copy with *amount_to_pay* added to ``paid``."""
        return replace(self, paid=self.paid + amount_to_pay)

    def with_new_lender(self, new_lender: AbstractParty) -> Obligation:
        return replace(self, lender=new_lender)

    def without_lender(self) -> Obligation:
        """Return a copy whose lender is the null-identity sentinel."""
        return replace(self, lender=NULL_PARTY)

    def same_entity(self, other: Obligation) -> bool:
        return self.linear_id == other.linear_id

    def __str__(self) -> str:
        return (
            f"Obligation({self.linear_id}): {display_name(self.borrower)} owes "
            f"{display_name(self.lender)} {self.amount} and has paid {self.paid} so far."
        )
