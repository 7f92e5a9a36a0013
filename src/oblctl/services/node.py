"""NodeService — the local identity and the peers it can see."""

from __future__ import annotations

from oblctl.services.base import BaseService
from oblctl.services.result import ServiceResult
from oblctl.services.telemetry import trace_span, traced


class NodeService(BaseService):
    """Identity lookups. Ledger outages propagate as TransportError."""

    @traced
    def me(self) -> ServiceResult:
        """The local node's legal name, read once when the connection opened."""
        return ServiceResult(ok=True, op="me", data={"me": str(self._ledger.me.name)})

    @traced
    def peers(self) -> ServiceResult:
        """Names of every node in a fresh network-map snapshot."""
        with trace_span("ledger.network_map_snapshot") as span:
            nodes = self._ledger.network_map_snapshot()
            if span:
                span.annotate("nodes", len(nodes))
        names = sorted(str(node.identity.name) for node in nodes)
        return ServiceResult(ok=True, op="peers", data={"peers": names})
