"""Domain layer — money, identities, obligations, aggregation, errors.

This layer depends only on stdlib and small value libraries (base58, pycountry).
It must never import from services, infrastructure, commands, or config.
"""
