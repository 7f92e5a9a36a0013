"""Command group: manage the local ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from oblctl.commands._base import OblGroup
from oblctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from oblctl.commands._context import AppContext


@click.group(cls=OblGroup)
@click.pass_obj
def ledger(app: AppContext) -> None:
    """Manage the local SQLite ledger."""


@ledger.command(
    "init",
    op="init_ledger",
    examples="""\
  oblctl ledger init PartyA --peer PartyB --peer PartyC
  oblctl ledger init "O=PartyA,L=London,C=GB" --peer "O=PartyB,L=New York,C=US"
  oblctl --json ledger init PartyA""",
)
@click.argument("node")
@click.option("--peer", "peers", multiple=True, help="Add another node to the network map.")
@click.pass_obj
def init_cmd(app: AppContext, node: str, peers: tuple[str, ...]) -> None:
    """Create the local ledger with NODE as this node's identity.

    Re-running adds missing peers and keeps the existing identity.
    """
    from oblctl.infrastructure.local.engine import init_ledger

    path = app.settings.ledger_path
    try:
        local = init_ledger(path, node, list(peers))
    except ValueError as exc:
        app.emit(
            ServiceResult(
                ok=False,
                op="init_ledger",
                error=ServiceError(code="INVALID_LEDGER", message=str(exc)),
            )
        )
        return

    app.emit(
        ServiceResult(
            ok=True,
            op="init_ledger",
            data={
                "me": str(local.name),
                "path": str(path),
                "peers": sorted(peers),
            },
        )
    )
