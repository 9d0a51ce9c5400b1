"""
Persistence adapters.

Services depend on SQLRepository for every read and write of people,
connections and activities; nothing else opens a session directly.
"""

from .sql_repository import Page, SQLRepository

__all__ = ["Page", "SQLRepository"]
