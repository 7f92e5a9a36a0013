"""Shared pytest fixtures and test doubles for oblctl tests."""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from oblctl.domain.errors import WorkflowFailure
from oblctl.domain.identity import AbstractParty, AnonymousParty, Party, PartyName
from oblctl.domain.obligation import Obligation
from oblctl.infrastructure.ledger import (
    FlowCommand,
    FlowHandle,
    IssueObligation,
    LedgerConnection,
    NodeInfo,
    SignedTransaction,
    StateAndRef,
    StateRef,
    completed_flow,
    failed_flow,
)
from oblctl.infrastructure.local.engine import init_ledger, new_key
from oblctl.services.telemetry import disable_telemetry


class FakeLedgerClient:
    """In-memory LedgerClient.

    Directory matching mirrors the local ledger: case-insensitive
    containment on the organisation, or equality when exact.
    """

    def __init__(
        self,
        me: Party,
        peers: list[Party] | None = None,
        obligations: list[Obligation] | None = None,
        confidential: dict[bytes, Party] | None = None,
    ) -> None:
        self.me = me
        self.peers = list(peers or [])
        self.obligations = list(obligations or [])
        self.confidential = dict(confidential or {})
        self.submitted: list[FlowCommand] = []
        self.flow_error: BaseException | None = None
        self.outputs_per_tx = 1
        self.closed = False
        self.fail_queries: Exception | None = None

    def _check(self) -> None:
        if self.fail_queries is not None:
            raise self.fail_queries

    def node_info(self) -> NodeInfo:
        return NodeInfo(legal_identities=(self.me,))

    def network_map_snapshot(self) -> list[NodeInfo]:
        self._check()
        return [NodeInfo(legal_identities=(p,)) for p in [self.me, *self.peers]]

    def query_obligations(self) -> list[StateAndRef]:
        self._check()
        return [
            StateAndRef(state=o, ref=StateRef("TX" + str(i), 0))
            for i, o in enumerate(self.obligations)
        ]

    def parties_from_name(self, query: str, *, exact_match: bool = False) -> set[Party]:
        self._check()
        needle = query.strip().casefold()
        if not needle:
            return set()
        result = set()
        for party in [self.me, *self.peers]:
            org = party.name.organisation.casefold()
            if (org == needle) if exact_match else (needle in org):
                result.add(party)
        return result

    def well_known_party_from_anonymous(self, identity: AbstractParty) -> Party | None:
        self._check()
        for party in [self.me, *self.peers]:
            if party.owning_key == identity.owning_key:
                return party
        return self.confidential.get(identity.owning_key)

    def start_flow(self, command: FlowCommand) -> FlowHandle:
        self.submitted.append(command)
        flow_id = uuid.uuid4().hex
        if self.flow_error is not None:
            return failed_flow(flow_id, self.flow_error)
        if not isinstance(command, IssueObligation):
            return failed_flow(flow_id, WorkflowFailure("unsupported"))
        outputs = tuple(
            Obligation.create(command.amount, command.lender, self.me)
            for _ in range(self.outputs_per_tx)
        )
        self.obligations.extend(outputs)
        return completed_flow(flow_id, SignedTransaction(id="ABC123", outputs=outputs))

    def close(self) -> None:
        self.closed = True


@pytest.fixture(autouse=True)
def _telemetry_off() -> Iterator[None]:
    """Telemetry is a context var; keep one test's --verbose from leaking into the next."""
    disable_telemetry()
    yield
    disable_telemetry()


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def make_party() -> Callable[[str], Party]:
    """Factory for well-known parties with fresh random keys."""

    def _make(name: str) -> Party:
        return Party(new_key(), name=PartyName.parse(name))

    return _make


@pytest.fixture
def party_a(make_party: Callable[[str], Party]) -> Party:
    return make_party("O=PartyA, L=London, C=GB")


@pytest.fixture
def party_b(make_party: Callable[[str], Party]) -> Party:
    return make_party("O=PartyB, L=New York, C=US")


@pytest.fixture
def party_c(make_party: Callable[[str], Party]) -> Party:
    return make_party("O=PartyC, L=Paris, C=FR")


@pytest.fixture
def fake_client(party_a: Party, party_b: Party, party_c: Party) -> FakeLedgerClient:
    """Fake ledger where PartyA is the local node and B and C are peers."""
    return FakeLedgerClient(me=party_a, peers=[party_b, party_c])


@pytest.fixture
def ledger(fake_client: FakeLedgerClient) -> LedgerConnection:
    return LedgerConnection(fake_client)


@pytest.fixture
def anonymous() -> Callable[[], AnonymousParty]:
    """Factory for fresh anonymous identities."""
    return lambda: AnonymousParty(new_key())


@pytest.fixture
def local_ledger_path(tmp_path: Path) -> Path:
    """Initialized local ledger: PartyA is this node, PartyB and PartyC are peers."""
    path = tmp_path / ".oblctl" / "ledger.db"
    init_ledger(path, "O=PartyA,L=London,C=GB", ["O=PartyB,L=New York,C=US", "PartyC"])
    return path


@pytest.fixture
def _isolated_ledger(
    tmp_path: Path, local_ledger_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Change CWD to a temp project with an initialized local ledger.

    Use via ``@pytest.mark.usefixtures("_isolated_ledger")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)
    for var in ("OBLCTL_CONFIG", "OBLCTL_LEDGER_URL"):
        monkeypatch.delenv(var, raising=False)
