"""Migration that creates the full-text index over archived messages."""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

_TRIGGERS = (
    """
    CREATE TRIGGER IF NOT EXISTS messages_fts_ai AFTER INSERT ON messages BEGIN
        INSERT INTO messages_fts(rowid, content) VALUES (new.id, new.content);
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS messages_fts_ad AFTER DELETE ON messages BEGIN
        INSERT INTO messages_fts(messages_fts, rowid, content)
        VALUES ('delete', old.id, old.content);
    END
    """,
    """
    CREATE TRIGGER IF NOT EXISTS messages_fts_au AFTER UPDATE OF content ON messages
    BEGIN
        INSERT INTO messages_fts(messages_fts, rowid, content)
        VALUES ('delete', old.id, old.content);
        INSERT INTO messages_fts(rowid, content) VALUES (new.id, new.content);
    END
    """,
)


async def migrate_messages_fts(engine: AsyncEngine) -> None:
    """messages テーブルの FTS5 インデックスを作成するマイグレーション

    messages_fts は messages.content を外部コンテンツとする FTS5 テーブルで、
    INSERT / UPDATE / DELETE トリガーで同期される。
    既存のメッセージがある状態で初めて作成した場合はインデックスを再構築する。

    Args:
        engine: SQLAlchemy AsyncEngine
    """
    async with engine.begin() as conn:
        result = await conn.execute(
            text(
                "SELECT name FROM sqlite_master "
                "WHERE type='table' AND name='messages_fts'"
            )
        )
        created = result.fetchone() is None

        if created:
            logger.info("Creating full-text index messages_fts...")
            await conn.execute(
                text(
                    "CREATE VIRTUAL TABLE messages_fts USING fts5("
                    "content, content='messages', content_rowid='id')"
                )
            )

        for trigger in _TRIGGERS:
            await conn.execute(text(trigger))

        if created:
            await conn.execute(
                text("INSERT INTO messages_fts(messages_fts) VALUES ('rebuild')")
            )
            logger.info("Full-text index messages_fts created")
        else:
            logger.debug("messages_fts already exists, skipping creation")
