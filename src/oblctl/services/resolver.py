"""PartyResolver — turn a caller-entered name into one network identity."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from oblctl.domain.errors import AmbiguousMatchError, NotFoundError

if TYPE_CHECKING:
    from oblctl.domain.identity import Party
    from oblctl.infrastructure.ledger import LedgerConnection

logger = logging.getLogger(__name__)


class PartyResolver:
    """Resolve name fragments against the ledger's directory.

    Matching follows the directory's rule: case-insensitive containment
    on the organisation name, or case-insensitive equality when *exact*.
    """

    def __init__(self, ledger: LedgerConnection) -> None:
        self._ledger = ledger

    def resolve(self, name_fragment: str, *, exact: bool = False) -> Party:
        """Return the single party matching *name_fragment*.

        Raises:
            NotFoundError: Nothing matches (or the fragment is blank).
            AmbiguousMatchError: More than one party matches.
            TransportError: The directory could not be queried.
        """
        if not name_fragment.strip():
            raise NotFoundError(name_fragment)

        matches = self._ledger.parties_from_name(name_fragment, exact_match=exact)
        logger.debug("Name %r matched %d parties", name_fragment, len(matches))
        if not matches:
            raise NotFoundError(name_fragment)
        if len(matches) > 1:
            raise AmbiguousMatchError(name_fragment, (str(p.name) for p in matches))
        (party,) = matches
        return party
