"""LocalLedgerClient — single-node ledger on SQLite.

Implements :class:`~oblctl.infrastructure.ledger.LedgerClient` against the
database created by :func:`~oblctl.infrastructure.local.engine.init_ledger`.
Flows execute synchronously inside one DB transaction, so an issuance
either commits a transaction and its output state or leaves no trace.

The contract rules enforced here (positive amount, distinct parties,
known counterparty) belong to the ledger, not to oblctl's core.
"""

from __future__ import annotations

import hashlib
import json
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError

from oblctl.domain.errors import TransportError, WorkflowFailure
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
from oblctl.infrastructure.ledger import (
    FlowCommand,
    FlowHandle,
    IssueObligation,
    NodeInfo,
    SignedTransaction,
    StateAndRef,
    StateRef,
    completed_flow,
    failed_flow,
)
from oblctl.infrastructure.local.engine import create_db_engine, new_key, now_iso
from oblctl.infrastructure.local.schema import (
    confidential_keys,
    obligation_states,
    parties,
    transactions,
)

if TYPE_CHECKING:
    from pathlib import Path

    from sqlalchemy import Connection, Row

logger = logging.getLogger(__name__)


class LocalLedgerClient:
    """Ledger client backed by a local SQLite file."""

    def __init__(self, db_path: Path) -> None:
        if not db_path.is_file():
            msg = f"No local ledger at {db_path}. Run `oblctl ledger init <node>` first."
            raise TransportError(msg)
        self.db_path = db_path
        self._engine = create_db_engine(db_path)

    @contextmanager
    def _read(self) -> Iterator[Connection]:
        try:
            with self._engine.connect() as conn:
                yield conn
        except SQLAlchemyError as exc:
            raise TransportError(f"Local ledger query failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Identity and directory
    # ------------------------------------------------------------------

    def node_info(self) -> NodeInfo:
        with self._read() as conn:
            row = conn.execute(select(parties).where(parties.c.is_local == 1)).first()
        if row is None:
            raise TransportError(f"Local ledger at {self.db_path} has no local identity")
        return NodeInfo(legal_identities=(_party_from_row(row),))

    def network_map_snapshot(self) -> list[NodeInfo]:
        with self._read() as conn:
            rows = conn.execute(select(parties).order_by(parties.c.name)).fetchall()
        return [NodeInfo(legal_identities=(_party_from_row(r),)) for r in rows]

    def parties_from_name(self, query: str, *, exact_match: bool = False) -> set[Party]:
        """Parties whose organisation contains (or equals) *query*, case-insensitively."""
        needle = query.strip().casefold()
        if not needle:
            return set()
        with self._read() as conn:
            rows = conn.execute(select(parties)).fetchall()
        matches = set()
        for row in rows:
            organisation = row.organisation.casefold()
            if (organisation == needle) if exact_match else (needle in organisation):
                matches.add(_party_from_row(row))
        return matches

    def well_known_party_from_anonymous(self, identity: AbstractParty) -> Party | None:
        key = encode_key(identity.owning_key)
        with self._read() as conn:
            return _well_known(conn, key)

    # ------------------------------------------------------------------
    # Vault
    # ------------------------------------------------------------------

    def query_obligations(self) -> list[StateAndRef]:
        """Unconsumed obligation states, oldest first."""
        with self._read() as conn:
            rows = conn.execute(
                select(obligation_states)
                .where(obligation_states.c.consumed == 0)
                .order_by(obligation_states.c.id)
            ).fetchall()
            known = {r.owning_key: r for r in conn.execute(select(parties)).fetchall()}

        result: list[StateAndRef] = []
        for row in rows:
            obligation = Obligation(
                amount=Money(row.amount, row.currency),
                lender=_identity(row.lender_key, known),
                borrower=_identity(row.borrower_key, known),
                paid=Money(row.paid, row.currency),
                linear_id=UniqueIdentifier.parse(row.linear_id),
            )
            result.append(
                StateAndRef(state=obligation, ref=StateRef(row.tx_id, row.output_index))
            )
        return result

    # ------------------------------------------------------------------
    # Flows
    # ------------------------------------------------------------------

    def start_flow(self, command: FlowCommand) -> FlowHandle:
        flow_id = uuid.uuid4().hex
        if not isinstance(command, IssueObligation):
            return failed_flow(flow_id, WorkflowFailure(f"Unsupported flow: {command!r}"))
        try:
            tx = self._issue(command)
        except WorkflowFailure as exc:
            logger.debug("Flow %s rejected: %s", flow_id, exc.message)
            return failed_flow(flow_id, exc)
        except SQLAlchemyError as exc:
            raise TransportError(f"Local ledger write failed: {exc}") from exc
        logger.debug("Flow %s committed transaction %s", flow_id, tx.id)
        return completed_flow(flow_id, tx)

    def _issue(self, command: IssueObligation) -> SignedTransaction:
        if command.amount.quantity <= 0:
            raise WorkflowFailure("A newly issued obligation must have a positive amount.")

        with self._engine.begin() as conn:
            me_row = conn.execute(select(parties).where(parties.c.is_local == 1)).first()
            if me_row is None:
                raise WorkflowFailure("Local node has no legal identity")
            me = _party_from_row(me_row)

            lender_key = encode_key(command.lender.owning_key)
            lender_row = conn.execute(
                select(parties).where(parties.c.owning_key == lender_key)
            ).first()
            if lender_row is None:
                raise WorkflowFailure(f"Unknown party {command.lender}")
            lender = _party_from_row(lender_row)
            if lender == me:
                raise WorkflowFailure("The lender and borrower cannot be the same identity.")

            lender_id: AbstractParty = lender
            borrower_id: AbstractParty = me
            if command.anonymous:
                lender_id = _mint_confidential(conn, lender)
                borrower_id = _mint_confidential(conn, me)

            obligation = Obligation.create(command.amount, lender_id, borrower_id)
            tx_id = _transaction_id(command.flow_name, obligation)
            conn.execute(
                insert(transactions).values(id=tx_id, flow=command.flow_name, created=now_iso())
            )
            conn.execute(
                insert(obligation_states).values(
                    tx_id=tx_id,
                    output_index=0,
                    linear_id=str(obligation.linear_id),
                    currency=obligation.amount.currency,
                    amount=obligation.amount.quantity,
                    paid=obligation.paid.quantity,
                    lender_key=encode_key(lender_id.owning_key),
                    borrower_key=encode_key(borrower_id.owning_key),
                )
            )
        return SignedTransaction(id=tx_id, outputs=(obligation,))

    def close(self) -> None:
        self._engine.dispose()


# ---------------------------------------------------------------------------
# Row helpers
# ---------------------------------------------------------------------------


def _party_from_row(row: Row) -> Party:
    return Party(decode_key(row.owning_key), name=PartyName.parse(row.name))


def _identity(key: str, known: dict[str, Row]) -> AbstractParty:
    """Well-known party if *key* is in the network map, else anonymous."""
    row = known.get(key)
    if row is not None:
        return _party_from_row(row)
    return AnonymousParty(decode_key(key))


def _well_known(conn: Connection, key: str) -> Party | None:
    row = conn.execute(select(parties).where(parties.c.owning_key == key)).first()
    if row is not None:
        return _party_from_row(row)
    owner = conn.execute(
        select(parties)
        .join(confidential_keys, confidential_keys.c.party_key == parties.c.owning_key)
        .where(confidential_keys.c.owning_key == key)
    ).first()
    return _party_from_row(owner) if owner is not None else None


def _mint_confidential(conn: Connection, owner: Party) -> AnonymousParty:
    """Create a fresh key owned by *owner* and register the mapping."""
    anonymous = AnonymousParty(new_key())
    conn.execute(
        insert(confidential_keys).values(
            owning_key=encode_key(anonymous.owning_key),
            party_key=encode_key(owner.owning_key),
            created=now_iso(),
        )
    )
    return anonymous


def _transaction_id(flow: str, obligation: Obligation) -> str:
    """Upper-case SHA-256 over the canonical transaction content."""
    content = {
        "flow": flow,
        "linear_id": str(obligation.linear_id),
        "amount": obligation.amount.quantity,
        "currency": obligation.amount.currency,
        "lender": encode_key(obligation.lender.owning_key),
        "borrower": encode_key(obligation.borrower.owning_key),
    }
    canonical = json.dumps(content, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest().upper()
