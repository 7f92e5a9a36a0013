"""HTTP client for a remote ledger node gateway.

Implements :class:`~oblctl.infrastructure.ledger.LedgerClient` over the
gateway's JSON API with a persistent :class:`httpx.Client`, so concurrent
requests in one process share a connection pool.

Error mapping:
- connection failures, timeouts, 5xx, malformed bodies -> TransportError
- 4xx from a flow submission -> WorkflowFailure (the flow was rejected)
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import ValidationError

from oblctl import __version__
from oblctl.domain.errors import TransportError, WorkflowFailure
from oblctl.domain.identity import encode_key
from oblctl.infrastructure.ledger import (
    FlowCommand,
    FlowHandle,
    IssueObligation,
    NodeInfo,
    StateAndRef,
    completed_flow,
    failed_flow,
)
from oblctl.infrastructure.wire import (
    IssueObligationRequest,
    MoneyPayload,
    NodeInfoPayload,
    PartyPayload,
    SignedTransactionPayload,
    StateAndRefPayload,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from oblctl.domain.identity import AbstractParty, Party

logger = logging.getLogger(__name__)


class HttpLedgerClient:
    """Synchronous client for a ledger node gateway.

    Attributes:
        base_url: Gateway root, e.g. ``http://127.0.0.1:10050``.
        timeout: Per-request timeout in seconds for queries. Flow
            submissions only bound the connect phase; the flow itself
            runs for as long as the workflow engine allows.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/json",
                "User-Agent": f"oblctl/{__version__}",
            },
            limits=httpx.Limits(max_keepalive_connections=10, max_connections=50),
        )
        logger.debug("Initialized HttpLedgerClient: base_url=%s timeout=%ss", base_url, timeout)

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Ledger request {method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Ledger unreachable at {self.base_url}: {exc}") from exc
        logger.debug("%s %s -> %s", method, path, response.status_code)
        if response.status_code >= 500:
            msg = f"Ledger returned HTTP {response.status_code} for {method} {path}"
            raise TransportError(msg)
        return response

    def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        response = self._send("GET", path, params=params)
        if response.status_code >= 400:
            msg = f"Ledger returned HTTP {response.status_code} for GET {path}"
            raise TransportError(msg)
        return _decode(response)

    # ------------------------------------------------------------------
    # LedgerClient
    # ------------------------------------------------------------------

    def node_info(self) -> NodeInfo:
        data = self._get_json("/api/node-info")
        return _validate(lambda: NodeInfoPayload.model_validate(data).to_domain())

    def network_map_snapshot(self) -> list[NodeInfo]:
        data = self._get_json("/api/network-map")
        return _validate(lambda: [NodeInfoPayload.model_validate(n).to_domain() for n in data])

    def query_obligations(self) -> list[StateAndRef]:
        data = self._get_json("/api/vault/obligations")
        return _validate(lambda: [StateAndRefPayload.model_validate(s).to_domain() for s in data])

    def parties_from_name(self, query: str, *, exact_match: bool = False) -> set[Party]:
        data = self._get_json(
            "/api/parties",
            params={"query": query, "exact": "true" if exact_match else "false"},
        )
        return _validate(lambda: {PartyPayload.model_validate(p).to_party() for p in data})

    def well_known_party_from_anonymous(self, identity: AbstractParty) -> Party | None:
        response = self._send(
            "GET",
            "/api/parties/well-known",
            params={"key": encode_key(identity.owning_key)},
        )
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            msg = f"Ledger returned HTTP {response.status_code} for well-known party lookup"
            raise TransportError(msg)
        data = _decode(response)
        return _validate(lambda: PartyPayload.model_validate(data).to_party())

    def start_flow(self, command: FlowCommand) -> FlowHandle:
        if not isinstance(command, IssueObligation):
            raise WorkflowFailure(f"Unsupported flow: {type(command).__name__}")

        body = IssueObligationRequest(
            amount=MoneyPayload.from_domain(command.amount),
            lender=PartyPayload.from_domain(command.lender),
            anonymous=command.anonymous,
        )
        response = self._send(
            "POST",
            f"/api/flows/{command.flow_name}",
            json=body.model_dump(mode="json"),
            timeout=httpx.Timeout(None, connect=self.timeout),
        )
        flow_id = response.headers.get("X-Flow-Id") or uuid.uuid4().hex

        if response.status_code >= 400:
            return failed_flow(flow_id, WorkflowFailure(_error_message(response)))

        data = _decode(response)
        tx = _validate(lambda: SignedTransactionPayload.model_validate(data).to_domain())
        return completed_flow(flow_id, tx)

    def close(self) -> None:
        self._client.close()


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise TransportError(f"Ledger sent a non-JSON response ({exc})") from exc


T = TypeVar("T")


def _validate(build: Callable[[], T]) -> T:
    """Run a payload conversion, mapping schema failures to TransportError."""
    try:
        result: T = build()
    except (ValidationError, ValueError, TypeError) as exc:
        raise TransportError(f"Ledger sent a malformed payload: {exc}") from exc
    return result


def _error_message(response: httpx.Response) -> str:
    """Extract the flow failure message from an error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"Flow failed with HTTP {response.status_code}"
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"Flow failed with HTTP {response.status_code}"
