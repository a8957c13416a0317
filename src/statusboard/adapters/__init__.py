"""Adapters - Infrastructure implementations of core interfaces.

Adapters are organized by type:
- db/: asyncpg application database
- auth/: membership storage and the hosted identity provider
- metrics/: Prometheus query client and service discovery sync
"""
