"""serve — start the MCP server (requires oblctl[mcp] extra)."""

from __future__ import annotations

import click

from oblctl.commands._base import OblCommand


@click.command(
    cls=OblCommand,
    examples="""\
  # Start the MCP server (transport from config, stdio by default)
  oblctl serve

  # Streamable HTTP on custom host/port
  oblctl serve --transport streamable-http --host 0.0.0.0 --port 9000""",
)
@click.option(
    "--transport",
    default=None,
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    help="MCP transport protocol (default from config).",
)
@click.option("--host", default="127.0.0.1", help="Bind address (HTTP transports only).")
@click.option("--port", default=8000, type=int, help="Listen port (HTTP transports only).")
@click.pass_obj
def serve(app: object, transport: str | None, host: str, port: int) -> None:
    """Start the MCP server (requires oblctl[mcp] extra)."""
    from oblctl.mcp.server import create_server, mcp_available

    if not mcp_available:
        click.echo("MCP not installed. Install with: pip install oblctl[mcp]", err=True)
        raise SystemExit(1)

    from oblctl.commands._context import AppContext

    assert isinstance(app, AppContext)
    server = create_server(settings=app.settings, host=host, port=port)
    server.run(transport=transport or app.settings.mcp.transport)
