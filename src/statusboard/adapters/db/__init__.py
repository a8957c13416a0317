"""Application database adapter."""

from statusboard.adapters.db.app_db import AppDatabase

__all__ = ["AppDatabase"]
