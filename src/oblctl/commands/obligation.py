"""Command group: query and issue obligations."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from oblctl.commands._base import OblGroup

if TYPE_CHECKING:
    from oblctl.commands._context import AppContext

_OBLIGATION_EXAMPLES = """\
  oblctl obligation owed
  oblctl obligation list
  oblctl obligation issue 5 USD PartyB
  oblctl obligation issue 20 GBP "O=PartyB,L=New York,C=US" --exact
  oblctl --json obligation issue 5 USD PartyB --no-anonymous"""


@click.group(cls=OblGroup, examples=_OBLIGATION_EXAMPLES)
@click.pass_obj
def obligation(app: AppContext) -> None:
    """Query and issue obligations."""


@obligation.command(
    op="owed_per_currency",
    examples="""\
  oblctl obligation owed
  oblctl -q obligation owed
  oblctl --json obligation owed""",
)
@click.pass_obj
def owed(app: AppContext) -> None:
    """Total owed per currency across obligations this node did not lend."""
    from oblctl.services.query import ObligationQueryService

    service = ObligationQueryService(
        app.ledger, resolve_anonymous=app.settings.query.resolve_anonymous
    )
    app.emit(service.owed_per_currency())


@obligation.command(
    "list",
    op="list_obligations",
    examples="""\
  oblctl obligation list
  oblctl --json obligation list
  oblctl obligation list --raw-identities""",
)
@click.option(
    "--raw-identities",
    is_flag=True,
    help="Show anonymous parties as keys instead of resolving them.",
)
@click.pass_obj
def list_cmd(app: AppContext, raw_identities: bool) -> None:
    """List every obligation visible to this node."""
    from oblctl.services.query import ObligationQueryService

    resolve = app.settings.query.resolve_anonymous and not raw_identities
    app.emit(ObligationQueryService(app.ledger, resolve_anonymous=resolve).list_obligations())


@obligation.command(
    op="issue_obligation",
    examples="""\
  oblctl obligation issue 5 USD PartyB
  oblctl obligation issue 100 eur Bank --exact
  oblctl obligation issue 5 USD PartyB --no-anonymous""",
)
@click.argument("amount", type=int)
@click.argument("currency")
@click.argument("party")
@click.option(
    "--exact/--fuzzy",
    default=None,
    help="Require an exact organisation match for PARTY (default from config).",
)
@click.option(
    "--anonymous/--no-anonymous",
    default=None,
    help="Use confidential identities for both parties (default from config).",
)
@click.pass_obj
def issue(
    app: AppContext,
    amount: int,
    currency: str,
    party: str,
    exact: bool | None,
    anonymous: bool | None,
) -> None:
    """Issue an obligation of AMOUNT CURRENCY owed by this node to PARTY.

    AMOUNT is in whole units: 5 USD is recorded as 500 minor units.
    """
    from oblctl.services.issue import IssueService

    cfg = app.settings.issue
    service = IssueService(
        app.ledger,
        anonymous=cfg.anonymous if anonymous is None else anonymous,
    )
    app.emit(
        service.issue(
            amount,
            currency,
            party,
            exact=cfg.exact_match if exact is None else exact,
        )
    )
