"""MCP tool definitions — 5 tools across 2 categories.

Categories: Node (2), Obligations (3).
Each tool has a ``<name>_impl`` function testable without the mcp package.
``register_tools()`` wraps them with FastMCP decorators.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from oblctl.domain.errors import TransportError
from oblctl.services.result import ServiceResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from oblctl.config.settings import OblSettings
    from oblctl.infrastructure.ledger import LedgerConnection


def _to_mcp_response(result: ServiceResult) -> dict[str, Any]:
    """Convert a ServiceResult to an MCP-friendly dict."""
    response: dict[str, Any] = {
        "ok": result.ok,
        "op": result.op,
        "data": result.data,
    }
    if result.warnings:
        response["warnings"] = result.warnings
    if result.error is not None:
        response["error"] = {
            "code": result.error.code,
            "message": result.error.message,
            "kind": result.error.kind,
        }
    return response


def _run(op: str, call: Callable[[], ServiceResult]) -> dict[str, Any]:
    """Invoke a query and report a ledger outage as a server-side error response."""
    try:
        result = call()
    except TransportError as exc:
        result = ServiceResult.failure(op, exc)
    return _to_mcp_response(result)


# ---------------------------------------------------------------------------
# Node tools (2)
# ---------------------------------------------------------------------------


def me_impl(ledger: LedgerConnection) -> dict[str, Any]:
    """The local node's legal identity."""
    from oblctl.services.node import NodeService

    return _run("me", NodeService(ledger).me)


def peers_impl(ledger: LedgerConnection) -> dict[str, Any]:
    """Names of every node on the network map."""
    from oblctl.services.node import NodeService

    return _run("peers", NodeService(ledger).peers)


# ---------------------------------------------------------------------------
# Obligation tools (3)
# ---------------------------------------------------------------------------


def owed_per_currency_impl(
    ledger: LedgerConnection, *, resolve_anonymous: bool = True
) -> dict[str, Any]:
    """Total owed per currency, in minor units."""
    from oblctl.services.query import ObligationQueryService

    service = ObligationQueryService(ledger, resolve_anonymous=resolve_anonymous)
    return _run("owed_per_currency", service.owed_per_currency)


def list_obligations_impl(
    ledger: LedgerConnection, *, resolve_anonymous: bool = True
) -> dict[str, Any]:
    """Every obligation visible to this node."""
    from oblctl.services.query import ObligationQueryService

    service = ObligationQueryService(ledger, resolve_anonymous=resolve_anonymous)
    return _run("list_obligations", service.list_obligations)


def issue_obligation_impl(
    ledger: LedgerConnection,
    amount: int,
    currency: str,
    party: str,
    *,
    exact: bool = False,
    anonymous: bool = True,
) -> dict[str, Any]:
    """Issue an obligation of *amount* whole units owed to *party*."""
    from oblctl.services.issue import IssueService

    result = IssueService(ledger, anonymous=anonymous).issue(amount, currency, party, exact=exact)
    return _to_mcp_response(result)


def register_tools(server: Any, ledger: LedgerConnection, settings: OblSettings) -> None:
    """Register all 5 MCP tools on the FastMCP server."""
    resolve = settings.query.resolve_anonymous

    @server.tool()  # type: ignore[untyped-decorator]
    def me() -> dict[str, Any]:
        """Return this node's legal identity."""
        return me_impl(ledger)

    @server.tool()  # type: ignore[untyped-decorator]
    def peers() -> dict[str, Any]:
        """List the names of all nodes on the network map."""
        return peers_impl(ledger)

    @server.tool()  # type: ignore[untyped-decorator]
    def owed_per_currency() -> dict[str, Any]:
        """Total owed per currency (minor units) for obligations this node did not lend."""
        return owed_per_currency_impl(ledger, resolve_anonymous=resolve)

    @server.tool()  # type: ignore[untyped-decorator]
    def list_obligations() -> dict[str, Any]:
        """List every obligation visible to this node."""
        return list_obligations_impl(ledger, resolve_anonymous=resolve)

    @server.tool()  # type: ignore[untyped-decorator]
    def issue_obligation(
        amount: int,
        currency: str,
        party: str,
        exact: bool | None = None,
    ) -> dict[str, Any]:
        """Issue an obligation of AMOUNT whole units of CURRENCY owed to PARTY."""
        return issue_obligation_impl(
            ledger,
            amount,
            currency,
            party,
            exact=settings.issue.exact_match if exact is None else exact,
            anonymous=settings.issue.anonymous,
        )
