"""SQLite engine setup and network-map seeding for the local ledger.

The local ledger stands in for a real ledger node during development and
tests. The DB lives at ``{root}/.oblctl/ledger.db`` by default.

SQLAlchemy Core (not ORM) is used because oblctl is a short-lived
process with no use for session management or identity maps.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event, insert, select
from sqlalchemy.engine import Engine

from oblctl.domain.identity import Party, PartyName, decode_key, encode_key
from oblctl.infrastructure.local.schema import metadata, parties

if TYPE_CHECKING:
    from sqlalchemy import Connection

KEY_BYTES = 32


def now_iso() -> str:
    """Current UTC time as ISO 8601."""
    return datetime.now(UTC).isoformat()


def new_key() -> bytes:
    """Fresh random public key material for a party or confidential identity."""
    return secrets.token_bytes(KEY_BYTES)


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine with WAL mode and foreign keys enabled."""
    engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


def init_ledger(db_path: Path, node: str, peers: list[str] | None = None) -> Party:
    """Create the ledger DB and seed the network map.

    *node* becomes the local identity; *peers* are added as other nodes.
    Idempotent: an existing local identity is kept and only missing
    peers are inserted.

    Returns the local party.

    Raises:
        ValueError: If a name cannot be parsed, or *node* conflicts with
            an existing local identity.
    """
    node_name = PartyName.parse(node)
    peer_names = [PartyName.parse(p) for p in peers or []]

    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_db_engine(db_path)
    try:
        metadata.create_all(engine)
        with engine.begin() as conn:
            row = conn.execute(
                select(parties.c.owning_key, parties.c.name).where(parties.c.is_local == 1)
            ).first()
            if row is None:
                local = _insert_party(conn, node_name, is_local=True)
            elif row.name != str(node_name):
                msg = f"Ledger at {db_path} already belongs to {row.name}"
                raise ValueError(msg)
            else:
                local = Party(decode_key(row.owning_key), name=node_name)

            for name in peer_names:
                exists = conn.execute(
                    select(parties.c.owning_key).where(parties.c.name == str(name))
                ).first()
                if exists is None:
                    _insert_party(conn, name, is_local=False)
    finally:
        engine.dispose()
    return local


def _insert_party(conn: Connection, name: PartyName, *, is_local: bool) -> Party:
    party = Party(new_key(), name=name)
    conn.execute(
        insert(parties).values(
            owning_key=encode_key(party.owning_key),
            name=str(name),
            organisation=name.organisation,
            is_local=1 if is_local else 0,
            created=now_iso(),
        )
    )
    return party
