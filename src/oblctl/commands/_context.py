"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Provides lazy ledger connection and centralized
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from oblctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from oblctl.config.settings import OblSettings
    from oblctl.infrastructure.ledger import LedgerConnection
    from oblctl.services.result import ServiceResult

EXIT_CLIENT_ERROR = 1
EXIT_SERVER_ERROR = 2


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  The ledger connection
    is opened on first use so ``--help`` and ``--version`` never touch
    the ledger.
    """

    def __init__(self, settings: OblSettings) -> None:
        self.settings = settings
        self._ledger: LedgerConnection | None = None

        from oblctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

        if settings.verbose:
            from oblctl.services.telemetry import enable_telemetry

            enable_telemetry()

    @property
    def ledger(self) -> LedgerConnection:
        """The ledger connection (opened lazily on first access).

        Raises TransportError when the ledger cannot be reached.
        """
        if self._ledger is None:
            from oblctl.infrastructure.ledger import LedgerConnection

            self._ledger = LedgerConnection.open(self.settings)
            click.get_current_context().call_on_close(self._ledger.close)
        return self._ledger

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Client failure: writes to stderr, exits with code 1.
        * Ledger outage: writes to stderr, exits with code 2.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(EXIT_SERVER_ERROR if result.server_error else EXIT_CLIENT_ERROR)
