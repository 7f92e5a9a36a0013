"""Root CLI group for oblctl with global flags and command registration."""

from __future__ import annotations

import click

from oblctl import __version__
from oblctl.commands import register_commands
from oblctl.commands._context import AppContext
from oblctl.config.settings import OblSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="oblctl")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug info.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option(
    "--ledger-url",
    default=None,
    help="Node gateway base URL; selects the HTTP ledger backend.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    ledger_url: str | None,
) -> None:
    """oblctl — query and issue obligations on a ledger node."""
    ctx.ensure_object(dict)
    settings = OblSettings.from_cli(
        config_path=config_path,
        json_output=json_output or None,
        quiet=quiet or None,
        verbose=verbose or None,
        log_json=log_json or None,
        ledger_url=ledger_url,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
