"""Tests for the SQLite-backed local ledger."""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import select

from oblctl.domain.errors import TransportError, WorkflowFailure
from oblctl.domain.identity import AnonymousParty, Party, PartyName
from oblctl.domain.money import Money
from oblctl.infrastructure.ledger import FlowCommand, IssueObligation
from oblctl.infrastructure.local.client import LocalLedgerClient
from oblctl.infrastructure.local.engine import create_db_engine, init_ledger
from oblctl.infrastructure.local.schema import confidential_keys, obligation_states


@pytest.fixture
def client(local_ledger_path: Path) -> LocalLedgerClient:
    c = LocalLedgerClient(local_ledger_path)
    try:
        yield c
    finally:
        c.close()


def _party(client: LocalLedgerClient, organisation: str) -> Party:
    (party,) = client.parties_from_name(organisation, exact_match=True)
    return party


class TestInitLedger:
    def test_returns_local_party(self, tmp_path: Path) -> None:
        me = init_ledger(tmp_path / "l.db", "O=Bank,C=GB")
        assert me.name == PartyName("Bank", country="GB")

    def test_is_idempotent_and_adds_missing_peers(self, tmp_path: Path) -> None:
        path = tmp_path / "l.db"
        first = init_ledger(path, "Bank", ["PeerOne"])
        second = init_ledger(path, "Bank", ["PeerOne", "PeerTwo"])
        assert first == second
        c = LocalLedgerClient(path)
        try:
            names = [str(n.identity.name) for n in c.network_map_snapshot()]
        finally:
            c.close()
        assert names == ["O=Bank", "O=PeerOne", "O=PeerTwo"]

    def test_rejects_different_local_identity(self, tmp_path: Path) -> None:
        path = tmp_path / "l.db"
        init_ledger(path, "Bank")
        with pytest.raises(ValueError, match="already belongs to O=Bank"):
            init_ledger(path, "OtherBank")

    def test_rejects_bad_name(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            init_ledger(tmp_path / "l.db", "X=1")


class TestLocalClientDirectory:
    def test_missing_database_is_transport_error(self, tmp_path: Path) -> None:
        with pytest.raises(TransportError, match="ledger init"):
            LocalLedgerClient(tmp_path / "missing.db")

    def test_node_info(self, client: LocalLedgerClient) -> None:
        assert str(client.node_info().identity.name) == "O=PartyA, L=London, C=GB"

    def test_network_map_includes_self(self, client: LocalLedgerClient) -> None:
        names = [n.identity.name.organisation for n in client.network_map_snapshot()]
        assert names == ["PartyA", "PartyB", "PartyC"]

    def test_fuzzy_match_is_case_insensitive_containment(
        self, client: LocalLedgerClient
    ) -> None:
        matches = client.parties_from_name("partyb")
        assert {p.name.organisation for p in matches} == {"PartyB"}
        assert len(client.parties_from_name("party")) == 3

    def test_exact_match(self, client: LocalLedgerClient) -> None:
        assert client.parties_from_name("Party", exact_match=True) == set()
        assert len(client.parties_from_name("PARTYC", exact_match=True)) == 1

    def test_blank_query_matches_nothing(self, client: LocalLedgerClient) -> None:
        assert client.parties_from_name("  ") == set()

    def test_well_known_party_for_own_key(self, client: LocalLedgerClient) -> None:
        b = _party(client, "PartyB")
        assert client.well_known_party_from_anonymous(b.anonymise()) == b

    def test_unknown_key_resolves_to_none(self, client: LocalLedgerClient) -> None:
        assert client.well_known_party_from_anonymous(AnonymousParty(b"\x09" * 32)) is None


class TestLocalClientIssue:
    def test_anonymous_issue_commits_confidential_identities(
        self, client: LocalLedgerClient, local_ledger_path: Path
    ) -> None:
        b = _party(client, "PartyB")
        with client.start_flow(IssueObligation(Money(500, "USD"), b)) as handle:
            tx = handle.return_value()

        obligation = tx.single_output
        assert len(tx.id) == 64 and tx.id == tx.id.upper()
        assert obligation.amount == Money(500, "USD")
        assert isinstance(obligation.lender, AnonymousParty)
        assert obligation.lender != b
        assert client.well_known_party_from_anonymous(obligation.lender) == b
        me = client.node_info().identity
        assert client.well_known_party_from_anonymous(obligation.borrower) == me

        engine = create_db_engine(local_ledger_path)
        try:
            with engine.connect() as conn:
                assert len(conn.execute(select(confidential_keys)).fetchall()) == 2
                assert len(conn.execute(select(obligation_states)).fetchall()) == 1
        finally:
            engine.dispose()

    def test_named_issue_uses_well_known_parties(self, client: LocalLedgerClient) -> None:
        b = _party(client, "PartyB")
        command = IssueObligation(Money(100, "GBP"), b, anonymous=False)
        tx = client.start_flow(command).return_value()
        assert tx.single_output.lender == b
        assert isinstance(tx.single_output.lender, Party)

    def test_issued_obligation_is_queryable(self, client: LocalLedgerClient) -> None:
        c = _party(client, "PartyC")
        command = IssueObligation(Money(700, "EUR"), c, anonymous=False)
        tx = client.start_flow(command).return_value()
        (state,) = client.query_obligations()
        assert state.state == tx.single_output
        assert state.state.linear_id == tx.single_output.linear_id
        assert state.ref.txhash == tx.id
        assert state.ref.index == 0

    def test_anonymous_parties_stay_anonymous_in_vault(self, client: LocalLedgerClient) -> None:
        b = _party(client, "PartyB")
        client.start_flow(IssueObligation(Money(1, "USD"), b)).return_value()
        (state,) = client.query_obligations()
        assert isinstance(state.state.lender, AnonymousParty)
        assert isinstance(state.state.borrower, AnonymousParty)

    @pytest.mark.parametrize("quantity", [0, -100])
    def test_non_positive_amount_is_rejected(
        self, client: LocalLedgerClient, quantity: int
    ) -> None:
        b = _party(client, "PartyB")
        handle = client.start_flow(IssueObligation(Money(quantity, "USD"), b))
        with pytest.raises(WorkflowFailure, match="positive amount"):
            handle.return_value()
        assert client.query_obligations() == []

    def test_self_issue_is_rejected(self, client: LocalLedgerClient) -> None:
        me = client.node_info().identity
        handle = client.start_flow(IssueObligation(Money(100, "USD"), me))
        with pytest.raises(WorkflowFailure, match="cannot be the same"):
            handle.return_value()

    def test_unknown_lender_is_rejected(self, client: LocalLedgerClient) -> None:
        stranger = Party(b"\x0a" * 32, name=PartyName("Stranger"))
        handle = client.start_flow(IssueObligation(Money(100, "USD"), stranger))
        with pytest.raises(WorkflowFailure, match="Unknown party"):
            handle.return_value()

    def test_unsupported_flow_fails(self, client: LocalLedgerClient) -> None:
        handle = client.start_flow(FlowCommand())
        with pytest.raises(WorkflowFailure, match="Unsupported flow"):
            handle.return_value()
