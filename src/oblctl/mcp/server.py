"""FastMCP server setup.

Optional extra — guarded behind try/except ImportError.
Transport: stdio default, streamable HTTP optional.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from oblctl.config.settings import OblSettings

mcp_available = False
_FastMCP: Any = None

try:
    from mcp.server.fastmcp import FastMCP as _FastMCP  # type: ignore[no-redef,import-not-found]

    mcp_available = True
except ImportError:
    pass

__all__ = ["create_server", "mcp_available"]


def create_server(
    *,
    settings: OblSettings | None = None,
    host: str = "127.0.0.1",
    port: int = 8000,
) -> Any:
    """Create and configure the MCP server.

    Opens one ledger connection from *settings* (or settings discovered
    from the CWD) and registers all tools against it. Returns the FastMCP
    instance.

    *host* and *port* configure the bind address for HTTP transports
    (sse, streamable-http). They are ignored when using stdio.

    Raises RuntimeError if the mcp extra is not installed, and
    TransportError if the ledger cannot be reached.
    """
    if not mcp_available or _FastMCP is None:
        msg = "MCP extra not installed. Install with: pip install oblctl[mcp]"
        raise RuntimeError(msg)

    from oblctl.config.settings import OblSettings
    from oblctl.infrastructure.ledger import LedgerConnection
    from oblctl.mcp.tools import register_tools

    settings = settings or OblSettings.from_cli()
    ledger = LedgerConnection.open(settings)

    server = _FastMCP("oblctl", host=host, port=port)
    register_tools(server, ledger, settings)

    return server
