"""Infrastructure layer — ledger connection, HTTP gateway client, local node.

This layer depends on the domain layer and third-party libs (httpx, SQLAlchemy).
It must never import from services, commands, or output.
"""
