"""Typed wire contracts for ledger payloads.

These models validate the JSON exchanged with a ledger node gateway and
convert it to and from domain values, so a malformed payload fails at
the boundary instead of deep inside a service.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from oblctl.domain.identity import (
    AbstractParty,
    AnonymousParty,
    Party,
    PartyName,
    decode_key,
    encode_key,
)
from oblctl.domain.money import Money
from oblctl.domain.obligation import Obligation, UniqueIdentifier
from oblctl.infrastructure.ledger import NodeInfo, SignedTransaction, StateAndRef, StateRef


class PartyPayload(BaseModel):
    """A party on the wire; ``name`` is absent for anonymous parties."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    owning_key: str

    @classmethod
    def from_domain(cls, party: AbstractParty) -> PartyPayload:
        name = str(party.name) if isinstance(party, Party) else None
        return cls(name=name, owning_key=encode_key(party.owning_key))

    def to_domain(self) -> AbstractParty:
        key = decode_key(self.owning_key)
        if self.name is None:
            return AnonymousParty(key)
        return Party(key, name=PartyName.parse(self.name))

    def to_party(self) -> Party:
        """Like :meth:`to_domain` but requires a well-known party."""
        party = self.to_domain()
        if not isinstance(party, Party):
            raise ValueError(f"Expected a well-known party, got key {self.owning_key}")
        return party


class MoneyPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: int
    currency: str = Field(min_length=3, max_length=3)

    @classmethod
    def from_domain(cls, money: Money) -> MoneyPayload:
        return cls(quantity=money.quantity, currency=money.currency)

    def to_domain(self) -> Money:
        return Money(self.quantity, self.currency)


class ObligationPayload(BaseModel):
    model_config = ConfigDict(frozen=True)

    linear_id: str
    amount: MoneyPayload
    paid: MoneyPayload
    lender: PartyPayload
    borrower: PartyPayload

    @classmethod
    def from_domain(cls, obligation: Obligation) -> ObligationPayload:
        return cls(
            linear_id=str(obligation.linear_id),
            amount=MoneyPayload.from_domain(obligation.amount),
            paid=MoneyPayload.from_domain(obligation.paid),
            lender=PartyPayload.from_domain(obligation.lender),
            borrower=PartyPayload.from_domain(obligation.borrower),
        )

    def to_domain(self) -> Obligation:
        return Obligation(
            amount=self.amount.to_domain(),
            lender=self.lender.to_domain(),
            borrower=self.borrower.to_domain(),
            paid=self.paid.to_domain(),
            linear_id=UniqueIdentifier.parse(self.linear_id),
        )


class NodeInfoPayload(BaseModel):
    legal_identities: list[PartyPayload] = Field(min_length=1)

    def to_domain(self) -> NodeInfo:
        return NodeInfo(legal_identities=tuple(p.to_party() for p in self.legal_identities))


class StateRefPayload(BaseModel):
    txhash: str
    index: int = Field(ge=0)


class StateAndRefPayload(BaseModel):
    state: ObligationPayload
    ref: StateRefPayload

    def to_domain(self) -> StateAndRef:
        return StateAndRef(
            state=self.state.to_domain(),
            ref=StateRef(txhash=self.ref.txhash, index=self.ref.index),
        )


class SignedTransactionPayload(BaseModel):
    id: str = Field(min_length=1)
    outputs: list[ObligationPayload] = Field(default_factory=list)

    def to_domain(self) -> SignedTransaction:
        return SignedTransaction(id=self.id, outputs=tuple(o.to_domain() for o in self.outputs))


class IssueObligationRequest(BaseModel):
    """Body of ``POST /api/flows/issue-obligation``."""

    amount: MoneyPayload
    lender: PartyPayload
    anonymous: bool = True


def obligation_to_dict(obligation: Obligation) -> dict[str, Any]:
    """Service-facing row: wire fields plus the display rendering."""
    row = ObligationPayload.from_domain(obligation).model_dump(mode="python")
    row["rendered"] = str(obligation)
    return row
