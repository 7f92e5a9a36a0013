"""Custom Click base classes with --examples support.

Provides OblCommand and OblGroup that accept an ``examples`` parameter.
When ``--examples`` is passed, the command prints usage examples and exits.

OblCommand also reports a ledger outage raised while the command runs
as a failed result for its operation, exiting with code 2.
"""

from __future__ import annotations

from typing import Any

import click

from oblctl.domain.errors import TransportError


def _add_examples_option(cmd: click.Command | click.Group, examples: str) -> None:
    """Attach an eager ``--examples`` flag to a Click command or group."""

    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples.",
        )
    )


class OblCommand(click.Command):
    """Click Command subclass with ``--examples`` and ledger-outage reporting.

    Args:
        examples: Text shown by ``--examples``.
        op: Operation name used when reporting a ledger outage; defaults
            to the command name with dashes replaced by underscores.
    """

    def __init__(
        self,
        *args: Any,
        examples: str | None = None,
        op: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        self.op = op or (self.name or "").replace("-", "_")
        if examples:
            _add_examples_option(self, examples)

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except TransportError as exc:
            from oblctl.commands._context import AppContext
            from oblctl.services.result import ServiceResult

            app = ctx.find_object(AppContext)
            if app is None:
                raise click.ClickException(exc.message) from exc
            app.emit(ServiceResult.failure(self.op, exc))
            raise  # emit() always exits for a failed result


class OblGroup(click.Group):
    """Click Group subclass that supports an ``--examples`` flag.

    Sets ``command_class = OblCommand`` so all subcommands automatically
    accept the ``examples`` parameter without explicit ``cls=`` each time.
    """

    command_class = OblCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            _add_examples_option(self, examples)
