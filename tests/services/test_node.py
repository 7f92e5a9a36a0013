"""Tests for NodeService."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

import pytest

from oblctl.domain.errors import TransportError
from oblctl.domain.identity import Party
from oblctl.infrastructure.ledger import LedgerConnection
from oblctl.services.node import NodeService

if TYPE_CHECKING:
    from tests.conftest import FakeLedgerClient


def test_me(ledger: LedgerConnection) -> None:
    result = NodeService(ledger).me()
    assert result.ok
    assert result.op == "me"
    assert result.data == {"me": "O=PartyA, L=London, C=GB"}


def test_peers_lists_every_node_sorted(ledger: LedgerConnection) -> None:
    result = NodeService(ledger).peers()
    assert result.ok
    assert result.data["peers"] == [
        "O=PartyA, L=London, C=GB",
        "O=PartyB, L=New York, C=US",
        "O=PartyC, L=Paris, C=FR",
    ]


def test_peers_is_a_fresh_snapshot(
    fake_client: FakeLedgerClient, ledger: LedgerConnection, make_party: Callable[[str], Party]
) -> None:
    service = NodeService(ledger)
    assert len(service.peers().data["peers"]) == 3
    fake_client.peers.append(make_party("PartyD"))
    assert "O=PartyD" in service.peers().data["peers"]


def test_peers_outage_propagates(
    fake_client: FakeLedgerClient, ledger: LedgerConnection
) -> None:
    fake_client.fail_queries = TransportError("down")
    with pytest.raises(TransportError):
        NodeService(ledger).peers()
