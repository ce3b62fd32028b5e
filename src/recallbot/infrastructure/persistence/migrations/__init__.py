"""Schema migrations run after table creation."""

from recallbot.infrastructure.persistence.migrations.fts_migration import (
    migrate_messages_fts,
)

__all__ = ["migrate_messages_fts"]
