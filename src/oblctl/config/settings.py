"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``OBLCTL_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``oblctl.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from oblctl.config.discovery import find_config
from oblctl.config.models import IssueConfig, LedgerConfig, McpConfig, QueryConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from an ``oblctl.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class OblSettings(BaseSettings):
    """Unified settings for the oblctl CLI and MCP server.

    Attributes:
        root: Project directory (parent of ``oblctl.toml``, or CWD). The
            local ledger path is resolved against it.
        config_path: The TOML file in effect, if any.
        ledger_url: ``--ledger-url`` override; selects the HTTP backend.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "OBLCTL_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    ledger_url: str | None = None

    # --- TOML sections ---
    ledger: LedgerConfig = Field(default_factory=LedgerConfig)
    issue: IssueConfig = Field(default_factory=IssueConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    mcp: McpConfig = Field(default_factory=McpConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> OblSettings:
        """Construct settings from a CLI invocation.

        Discovers ``oblctl.toml`` via walk-up (or explicit *config_path*),
        resolves *root* from the config file's parent directory, and
        merges CLI flags as highest-priority overrides. Flags passed as
        None are dropped so env vars and TOML still apply.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        flags = {k: v for k, v in cli_flags.items() if v is not None}

        _tls.toml_path = toml_path
        try:
            return cls(root=resolved_root, config_path=toml_path, **flags)
        finally:
            _tls.toml_path = None

    @property
    def ledger_backend(self) -> str:
        """Effective backend: an explicit ``ledger_url`` always means HTTP."""
        return "http" if self.ledger_url else self.ledger.backend

    @property
    def ledger_endpoint(self) -> str:
        return self.ledger_url or self.ledger.url

    @property
    def ledger_path(self) -> Path:
        path = Path(self.ledger.path)
        return path if path.is_absolute() else self.root / path
