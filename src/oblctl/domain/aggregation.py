"""Currency-grouped totals over a snapshot of obligations."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from oblctl.domain.identity import AbstractParty
from oblctl.domain.obligation import Obligation


def owed_per_currency(
    obligations: Iterable[Obligation],
    local_identity: AbstractParty,
) -> dict[str, int]:
    """Sum obligation amounts per currency, skipping those lent by *local_identity*.

    Only currencies with at least one surviving obligation appear in the
    result; an empty input yields an empty mapping.
    """
    totals: defaultdict[str, int] = defaultdict(int)
    for obligation in obligations:
        if obligation.lender == local_identity:
            continue
        totals[obligation.amount.currency] += obligation.amount.quantity
    return dict(totals)
