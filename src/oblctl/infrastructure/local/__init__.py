"""Local single-node development ledger backed by SQLite."""
