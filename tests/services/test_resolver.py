"""Tests for PartyResolver."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from oblctl.domain.errors import AmbiguousMatchError, NotFoundError, TransportError
from oblctl.domain.identity import Party
from oblctl.infrastructure.ledger import LedgerConnection
from oblctl.services.resolver import PartyResolver

if TYPE_CHECKING:
    from tests.conftest import FakeLedgerClient


def test_unique_fuzzy_match(ledger: LedgerConnection, party_b: Party) -> None:
    assert PartyResolver(ledger).resolve("partyb") == party_b


def test_no_match_names_the_input(ledger: LedgerConnection) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        PartyResolver(ledger).resolve("Nonexistent")
    assert "Nonexistent" in exc_info.value.message


def test_multiple_matches_are_ambiguous(ledger: LedgerConnection) -> None:
    with pytest.raises(AmbiguousMatchError) as exc_info:
        PartyResolver(ledger).resolve("Party")
    assert len(exc_info.value.candidates) == 3
    assert exc_info.value.candidates == sorted(exc_info.value.candidates)


def test_exact_narrows_to_one(
    fake_client: FakeLedgerClient, make_party: Callable[[str], Party], party_b: Party
) -> None:
    fake_client.peers.append(make_party("PartyBank"))
    ledger = LedgerConnection(fake_client)
    with pytest.raises(AmbiguousMatchError):
        PartyResolver(ledger).resolve("partyb")
    assert PartyResolver(ledger).resolve("PARTYB", exact=True) == party_b


def test_exact_requires_whole_organisation(ledger: LedgerConnection) -> None:
    with pytest.raises(NotFoundError):
        PartyResolver(ledger).resolve("Part", exact=True)


@pytest.mark.parametrize("fragment", ["", "   "])
def test_blank_fragment_is_not_found(ledger: LedgerConnection, fragment: str) -> None:
    with pytest.raises(NotFoundError):
        PartyResolver(ledger).resolve(fragment)


def test_directory_outage_propagates(
    fake_client: FakeLedgerClient, ledger: LedgerConnection
) -> None:
    fake_client.fail_queries = OSError("reset")
    with pytest.raises(TransportError):
        PartyResolver(ledger).resolve("PartyB")
