"""Persistence-related exceptions."""


class PersistenceError(Exception):
    """Base exception for persistence-related errors."""


class DatabaseError(PersistenceError):
    """Archive database operation error (schema setup, migrations)."""
