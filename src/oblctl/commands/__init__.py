"""Subcommand modules for oblctl.

Provides register_commands() which uses deferred imports to keep
``oblctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register command groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from oblctl.commands.ledger import ledger
    from oblctl.commands.obligation import obligation

    cli.add_command(obligation)
    cli.add_command(ledger)

    # --- Standalone commands ---
    from oblctl.commands.node import me, peers
    from oblctl.commands.serve import serve

    cli.add_command(me)
    cli.add_command(peers)
    cli.add_command(serve)
