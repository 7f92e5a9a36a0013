"""BaseService — foundation for all oblctl services.

Every service receives a :class:`LedgerConnection` at construction time
and reads the ledger only through it. Services hold no mutable state
between calls, so one instance may serve concurrent requests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from oblctl.infrastructure.ledger import LedgerConnection


class BaseService:
    """Base for service-layer classes.

    Usage::

        class NodeService(BaseService):
            def me(self) -> ServiceResult:
                return ServiceResult(ok=True, op="me", data={"me": str(self._ledger.me)})
    """

    def __init__(self, ledger: LedgerConnection) -> None:
        self._ledger = ledger
