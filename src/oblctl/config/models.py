"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, oblctl.toml only contains
overrides. A local development node needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel


class LedgerConfig(BaseModel):
    """[ledger] section."""

    model_config = {"frozen": True}

    backend: Literal["local", "http"] = "local"
    url: str = "http://127.0.0.1:10050"
    timeout: float = 30.0
    path: str = ".oblctl/ledger.db"


class IssueConfig(BaseModel):
    """[issue] section."""

    model_config = {"frozen": True}

    anonymous: bool = True
    exact_match: bool = False


class QueryConfig(BaseModel):
    """[query] section."""

    model_config = {"frozen": True}

    resolve_anonymous: bool = True


class McpConfig(BaseModel):
    """[mcp] section."""

    model_config = {"frozen": True}

    transport: Literal["stdio", "sse", "streamable-http"] = "stdio"
