"""SQLAlchemy Core table definitions for the local development ledger.

Keys are stored base-58 encoded. An obligation state is never updated in
place: a new version is inserted and the previous one marked consumed.
"""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Index, Integer, MetaData, Table, Text

metadata = MetaData()

parties = Table(
    "parties",
    metadata,
    Column("owning_key", Text, primary_key=True),
    Column("name", Text, nullable=False, unique=True),  # X.500 form
    Column("organisation", Text, nullable=False),
    Column("is_local", Integer, default=0, server_default="0"),
    Column("created", Text, nullable=False),
)

confidential_keys = Table(
    "confidential_keys",
    metadata,
    Column("owning_key", Text, primary_key=True),
    Column("party_key", Text, ForeignKey("parties.owning_key"), nullable=False),
    Column("created", Text, nullable=False),
)

transactions = Table(
    "transactions",
    metadata,
    Column("id", Text, primary_key=True),
    Column("flow", Text, nullable=False),
    Column("created", Text, nullable=False),
)

obligation_states = Table(
    "obligation_states",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("tx_id", Text, ForeignKey("transactions.id"), nullable=False),
    Column("output_index", Integer, nullable=False),
    Column("linear_id", Text, nullable=False),
    Column("currency", Text, nullable=False),
    Column("amount", Integer, nullable=False),
    Column("paid", Integer, nullable=False, default=0, server_default="0"),
    Column("lender_key", Text, nullable=False),
    Column("borrower_key", Text, nullable=False),
    Column("consumed", Integer, default=0, server_default="0"),
)

Index("ix_obligation_states_linear_id", obligation_states.c.linear_id)
Index("ix_obligation_states_consumed", obligation_states.c.consumed)
Index("ix_parties_organisation", parties.c.organisation)
