"""Standalone commands: me, peers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from oblctl.commands._base import OblCommand
from oblctl.services.node import NodeService

if TYPE_CHECKING:
    from oblctl.commands._context import AppContext


@click.command(
    cls=OblCommand,
    examples="""\
  oblctl me
  oblctl --json me
  oblctl --ledger-url http://127.0.0.1:10050 me""",
)
@click.pass_obj
def me(app: AppContext) -> None:
    """Show this node's legal identity."""
    app.emit(NodeService(app.ledger).me())


@click.command(
    cls=OblCommand,
    examples="""\
  oblctl peers
  oblctl -q peers | grep PartyB""",
)
@click.pass_obj
def peers(app: AppContext) -> None:
    """List every node on the network map."""
    app.emit(NodeService(app.ledger).peers())
