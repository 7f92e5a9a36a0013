"""IssueService — create a new obligation owed to a named counterparty.

One request moves through::

    received -> resolving -> submitting -> committed | rejected

There is no retry and no partial state: the workflow engine either
commits a transaction with the new obligation or commits nothing. The
request blocks on the flow result with no client-side timeout.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import structlog

from oblctl.domain.errors import OblctlError, WorkflowFailure
from oblctl.domain.money import Money, parse_currency
from oblctl.infrastructure.ledger import IssueObligation
from oblctl.infrastructure.wire import obligation_to_dict
from oblctl.services.base import BaseService
from oblctl.services.resolver import PartyResolver
from oblctl.services.result import ServiceResult
from oblctl.services.telemetry import trace_span, traced

if TYPE_CHECKING:
    from oblctl.infrastructure.ledger import LedgerConnection

log = structlog.get_logger(__name__)

OP = "issue_obligation"


class IssueService(BaseService):
    """Issuance command handler.

    Args:
        ledger: Open ledger connection.
        anonymous: Ask the flow to use fresh confidential identities for
            both parties.
    """

    def __init__(self, ledger: LedgerConnection, *, anonymous: bool = True) -> None:
        super().__init__(ledger)
        self._anonymous = anonymous

    @traced
    def issue(
        self,
        amount: int,
        currency: str,
        party: str,
        *,
        exact: bool = False,
    ) -> ServiceResult:
        """Issue an obligation of *amount* whole units of *currency* owed to *party*.

        Args:
            amount: Whole major units; stored as ``amount * 100`` minor units.
            currency: ISO 4217 code, e.g. ``"USD"``.
            party: Name fragment of the lender.
            exact: Require an exact (case-insensitive) organisation match.

        Returns a failed result carrying the underlying message for any
        failure. Ledger outages are marked ``kind="server"``; everything
        else is a client error.
        """
        req = log.bind(request=uuid.uuid4().hex[:12], party=party)
        req.debug("issue.received", amount=amount, currency=currency)

        try:
            req.debug("issue.resolving")
            lender = PartyResolver(self._ledger).resolve(party, exact=exact)
            issue_amount = Money.of_major(amount, parse_currency(currency))

            command = IssueObligation(issue_amount, lender, anonymous=self._anonymous)
            req.debug("issue.submitting", lender=str(lender.name), amount=str(issue_amount))
            with trace_span("flow.issue_obligation") as span:
                with self._ledger.start_flow(command) as handle:
                    if span:
                        span.annotate("flow_id", handle.flow_id)
                    tx = handle.return_value()
            obligation = tx.single_output
        except OblctlError as exc:
            req.info("issue.rejected", code=exc.code, reason=exc.message)
            return ServiceResult.failure(OP, exc)
        except Exception as exc:
            # Anything else raised by the workflow engine is reported as a flow failure.
            req.warning("issue.rejected", code=WorkflowFailure.code, exc_info=True)
            return ServiceResult.failure(OP, WorkflowFailure(str(exc) or type(exc).__name__))

        req.info("issue.committed", tx_id=tx.id)
        return ServiceResult(
            ok=True,
            op=OP,
            data={
                "tx_id": tx.id,
                "obligation": obligation_to_dict(obligation),
                "message": f"Transaction id {tx.id} committed to ledger.\n{obligation}",
            },
        )
