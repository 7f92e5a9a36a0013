"""ObligationQueryService — read-only views over the obligation vault.

Two surfaces, both built from one point-in-time snapshot per call:
- owed_per_currency: totals per currency of obligations not lent by this node
- list_obligations: every visible obligation with its display rendering

Queries do not catch TransportError: a ledger outage is a server-side
failure for the API surface to report, never an empty result.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING

from oblctl.domain.aggregation import owed_per_currency
from oblctl.domain.identity import NULL_PARTY, Party
from oblctl.infrastructure.wire import obligation_to_dict
from oblctl.services.base import BaseService
from oblctl.services.result import ServiceResult
from oblctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from oblctl.domain.identity import AbstractParty
    from oblctl.domain.obligation import Obligation
    from oblctl.infrastructure.ledger import LedgerConnection

logger = logging.getLogger(__name__)


class ObligationQueryService(BaseService):
    """Aggregation and listing over the current obligation snapshot.

    Args:
        ledger: Open ledger connection.
        resolve_anonymous: Map anonymous lenders/borrowers to their
            well-known parties where the ledger can resolve them.
    """

    def __init__(self, ledger: LedgerConnection, *, resolve_anonymous: bool = True) -> None:
        super().__init__(ledger)
        self._resolve_anonymous = resolve_anonymous

    def _snapshot(self) -> list[Obligation]:
        with trace_span("ledger.query_obligations") as span:
            obligations = list(self._ledger.query_obligations())
            if span:
                span.annotate("states", len(obligations))
        if not self._resolve_anonymous:
            return obligations

        cache: dict[bytes, AbstractParty] = {}
        with trace_span("ledger.resolve_anonymous"):
            return [
                replace(
                    o,
                    lender=self._well_known(o.lender, cache),
                    borrower=self._well_known(o.borrower, cache),
                )
                for o in obligations
            ]

    def _well_known(
        self, identity: AbstractParty, cache: dict[bytes, AbstractParty]
    ) -> AbstractParty:
        if isinstance(identity, Party) or identity == NULL_PARTY:
            return identity
        key = identity.owning_key
        if key not in cache:
            cache[key] = self._ledger.well_known_party_from_anonymous(identity) or identity
        return cache[key]

    @traced
    def owed_per_currency(self) -> ServiceResult:
        """Total minor units per currency across obligations this node did not lend."""
        totals = owed_per_currency(self._snapshot(), self._ledger.me)
        logger.debug("Aggregated %d currencies", len(totals))
        return ServiceResult(
            ok=True,
            op="owed_per_currency",
            data={"owed": dict(sorted(totals.items()))},
        )

    @traced
    def list_obligations(self) -> ServiceResult:
        """Every obligation visible to this node, unfiltered by party."""
        items = [obligation_to_dict(o) for o in self._snapshot()]
        return ServiceResult(
            ok=True,
            op="list_obligations",
            data={"count": len(items), "items": items},
        )
