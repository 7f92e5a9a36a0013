"""Error taxonomy shared by the domain, infrastructure, and service layers.

Services translate these into :class:`~oblctl.services.result.ServiceError`
at their boundary. ``client_error`` separates failures the caller can fix
(bad party name, bad currency, rejected flow) from ledger outages.
"""

from __future__ import annotations

from collections.abc import Iterable


class OblctlError(Exception):
    """Base class for all oblctl failures."""

    code: str = "ERROR"
    client_error: bool = True

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(OblctlError):
    """No party on the network matches the requested name."""

    code = "NOT_FOUND"

    def __init__(self, name: str) -> None:
        super().__init__(f"Couldn't lookup node identity for {name}.")
        self.name = name


class AmbiguousMatchError(OblctlError):
    """More than one party matches the requested name."""

    code = "AMBIGUOUS_MATCH"

    def __init__(self, name: str, candidates: Iterable[str]) -> None:
        self.name = name
        self.candidates = sorted(candidates)
        listed = ", ".join(self.candidates)
        super().__init__(f"Name `{name}` matches multiple nodes on the network: {listed}.")


class CurrencyFormatError(OblctlError):
    """The currency code is not a recognised ISO 4217 code."""

    code = "INVALID_CURRENCY"

    def __init__(self, currency: str) -> None:
        super().__init__(f"Unknown currency code `{currency}`.")
        self.currency = currency


class TransportError(OblctlError):
    """The ledger or workflow service is unreachable or sent malformed data."""

    code = "LEDGER_UNAVAILABLE"
    client_error = False


class WorkflowFailure(OblctlError):
    """The workflow engine rejected or failed the requested flow."""

    code = "FLOW_FAILED"


class CurrencyMismatchError(ValueError):
    """Arithmetic attempted between amounts of different currencies."""

    def __init__(self, left: str, right: str) -> None:
        super().__init__(f"Cannot combine amounts in {left} and {right}")
        self.left = left
        self.right = right
