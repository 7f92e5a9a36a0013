"""LedgerConnection — the single dependency injected into every service.

The ledger service and its workflow engine are external collaborators.
:class:`LedgerClient` is the narrow interface oblctl consumes from them;
:class:`LedgerConnection` wraps a client for the lifetime of one process
and caches the local node identity read when it is opened.

Flows are submitted as typed command objects (:class:`IssueObligation`)
and awaited through a :class:`FlowHandle`.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, TypeVar

from oblctl.domain.errors import OblctlError, TransportError, WorkflowFailure

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from oblctl.config.settings import OblSettings
    from oblctl.domain.identity import AbstractParty, Party
    from oblctl.domain.money import Money
    from oblctl.domain.obligation import Obligation

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Collaborator data shapes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NodeInfo:
    """A node on the network and the legal identities it hosts."""

    legal_identities: tuple[Party, ...]

    @property
    def identity(self) -> Party:
        return self.legal_identities[0]


@dataclass(frozen=True, slots=True)
class StateRef:
    """Pointer to one output of a committed transaction."""

    txhash: str
    index: int


@dataclass(frozen=True, slots=True)
class StateAndRef:
    state: Obligation
    ref: StateRef


@dataclass(frozen=True, slots=True)
class SignedTransaction:
    """Result of a committed flow: the transaction id and its output states."""

    id: str
    outputs: tuple[Obligation, ...] = field(default_factory=tuple)

    @property
    def single_output(self) -> Obligation:
        if len(self.outputs) != 1:
            msg = f"Transaction {self.id} has {len(self.outputs)} outputs, expected one"
            raise WorkflowFailure(msg)
        return self.outputs[0]


# ---------------------------------------------------------------------------
# Flow commands
# ---------------------------------------------------------------------------


class FlowCommand:
    """Base for typed workflow commands."""

    flow_name: str = ""


@dataclass(frozen=True, slots=True)
class IssueObligation(FlowCommand):
    """Issue a new obligation owed by the local node to *lender*."""

    amount: Money
    lender: Party
    anonymous: bool = True

    flow_name = "issue-obligation"


class FlowHandle:
    """Handle on a submitted flow; :meth:`return_value` blocks until it finishes.

    Once submitted, a flow runs to completion on the ledger regardless of
    whether the handle is awaited or closed.
    """

    def __init__(self, flow_id: str, future: Future[SignedTransaction]) -> None:
        self.flow_id = flow_id
        self._future = future

    def return_value(self) -> SignedTransaction:
        """Block for the flow result; re-raises the flow's failure."""
        return self._future.result()

    def close(self) -> None:
        logger.debug("Closed handle for flow %s", self.flow_id)

    def __enter__(self) -> FlowHandle:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def completed_flow(flow_id: str, result: SignedTransaction) -> FlowHandle:
    future: Future[SignedTransaction] = Future()
    future.set_result(result)
    return FlowHandle(flow_id, future)


def failed_flow(flow_id: str, error: BaseException) -> FlowHandle:
    future: Future[SignedTransaction] = Future()
    future.set_exception(error)
    return FlowHandle(flow_id, future)


# ---------------------------------------------------------------------------
# Collaborator interface
# ---------------------------------------------------------------------------


class LedgerClient(Protocol):
    """Operations oblctl consumes from the ledger and workflow services."""

    def node_info(self) -> NodeInfo: ...

    def network_map_snapshot(self) -> list[NodeInfo]: ...

    def query_obligations(self) -> list[StateAndRef]: ...

    def parties_from_name(self, query: str, *, exact_match: bool = False) -> set[Party]: ...

    def well_known_party_from_anonymous(self, identity: AbstractParty) -> Party | None: ...

    def start_flow(self, command: FlowCommand) -> FlowHandle: ...

    def close(self) -> None: ...


# ---------------------------------------------------------------------------
# LedgerConnection
# ---------------------------------------------------------------------------


class LedgerConnection:
    """Process-lifetime session with the ledger.

    The local identity is read once when the connection opens and is
    exposed read-only as :attr:`me`. Safe to share between concurrent
    requests as long as the underlying client is.
    """

    def __init__(self, client: LedgerClient) -> None:
        self._client = client
        self._me = _translate(client.node_info).identity
        logger.debug("Opened ledger connection as %s", self._me)

    @classmethod
    def open(cls, settings: OblSettings) -> LedgerConnection:
        """Open a connection to the backend selected by *settings*."""
        client: LedgerClient
        if settings.ledger_backend == "http":
            from oblctl.infrastructure.http_client import HttpLedgerClient

            client = HttpLedgerClient(settings.ledger_endpoint, timeout=settings.ledger.timeout)
        else:
            from oblctl.infrastructure.local.client import LocalLedgerClient

            client = LocalLedgerClient(settings.ledger_path)
        try:
            return cls(client)
        except BaseException:
            client.close()
            raise

    @property
    def me(self) -> Party:
        return self._me

    @property
    def client(self) -> LedgerClient:
        return self._client

    def query_obligations(self) -> tuple[Obligation, ...]:
        """Point-in-time snapshot of the obligations visible to this node."""
        states = _translate(self._client.query_obligations)
        return tuple(s.state for s in states)

    def network_map_snapshot(self) -> list[NodeInfo]:
        return _translate(self._client.network_map_snapshot)

    def parties_from_name(self, query: str, *, exact_match: bool = False) -> set[Party]:
        return _translate(lambda: self._client.parties_from_name(query, exact_match=exact_match))

    def well_known_party_from_anonymous(self, identity: AbstractParty) -> Party | None:
        return _translate(lambda: self._client.well_known_party_from_anonymous(identity))

    def start_flow(self, command: FlowCommand) -> FlowHandle:
        return _translate(lambda: self._client.start_flow(command))

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> LedgerConnection:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


T = TypeVar("T")


def _translate(call: Callable[[], T]) -> T:
    """Run a client call, surfacing unexpected client failures as TransportError."""
    try:
        return call()
    except OblctlError:
        raise
    except (OSError, ValueError, KeyError) as exc:
        raise TransportError(f"Ledger query failed: {exc}") from exc
