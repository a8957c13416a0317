"""statusboard - multi-tenant status page backend."""

__version__ = "1.0.0"
