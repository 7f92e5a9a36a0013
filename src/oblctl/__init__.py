"""oblctl — query and issue debt obligations on a shared ledger."""

__version__ = "0.1.0"
