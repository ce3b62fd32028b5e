"""SQLite implementation of MessageRepository."""

import json
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from sqlalchemy import distinct, func, text
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from recallbot.domain.entities import ArchiveStats, Channel, Message, User
from recallbot.infrastructure.persistence.datetime_utils import (
    normalize_to_utc,
    to_storage,
)
from recallbot.infrastructure.persistence.fts_query import build_fts_query
from recallbot.infrastructure.persistence.models import MessageModel

logger = logging.getLogger(__name__)

_SEARCH_SQL = """
    SELECT m.id
    FROM messages_fts
    JOIN messages m ON m.id = messages_fts.rowid
    WHERE messages_fts MATCH :query
      AND m.guild_id = :guild_id
      AND m.content != ''
      {author_filter}
    ORDER BY messages_fts.rank
    LIMIT :limit
"""


class SQLiteMessageRepository:
    """SQLite 版 MessageRepository 実装

    アーカイブ済みメッセージの保存・検索を SQLite データベースに対して行う。
    全文検索は FTS5 テーブル messages_fts を使用する。
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
        """
        self._session_factory = session_factory

    async def save(self, message: Message) -> None:
        """メッセージを保存する（upsert）

        既存のメッセージが存在する場合は本文・投稿者名・メンションを更新する。

        Args:
            message: 保存するメッセージ
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(MessageModel).where(
                    MessageModel.message_id == message.id,
                    MessageModel.channel_id == message.channel.id,
                )
            )
            existing = result.first()

            if existing:
                existing.content = message.text
                existing.user_name = message.user.label
                existing.mentions = json.dumps(message.mentions)
                session.add(existing)
            else:
                session.add(self._to_model(message))

            await session.commit()

    async def delete(self, message_id: str, channel_id: str) -> None:
        """メッセージを削除する

        Args:
            message_id: メッセージ ID
            channel_id: チャンネル ID
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(MessageModel).where(
                    MessageModel.message_id == message_id,
                    MessageModel.channel_id == channel_id,
                )
            )
            existing = result.first()
            if existing is None:
                return
            await session.delete(existing)
            await session.commit()

    async def find_by_id(self, message_id: str, channel_id: str) -> Message | None:
        """ID でメッセージを検索する

        Args:
            message_id: メッセージ ID（Slack の ts）
            channel_id: チャンネル ID

        Returns:
            メッセージ（存在しない場合は None）
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(MessageModel).where(
                    MessageModel.message_id == message_id,
                    MessageModel.channel_id == channel_id,
                )
            )
            model = result.first()
            if model is None:
                return None
            return self._to_entity(model)

    async def search(
        self,
        guild_id: str,
        query: str,
        limit: int = 50,
        author_id: str | None = None,
    ) -> list[Message]:
        """ギルド内のメッセージを全文検索する

        FTS5 の関連度順で返す。検索語が作れない場合は空リスト。

        Args:
            guild_id: ギルド ID
            query: 記号を除去済みの検索文字列
            limit: 取得する最大件数
            author_id: 指定した場合、この投稿者のメッセージに限定する

        Returns:
            メッセージリスト（関連度順）
        """
        fts_query = build_fts_query(query)
        if not fts_query:
            return []

        params: dict[str, object] = {
            "query": fts_query,
            "guild_id": guild_id,
            "limit": limit,
        }
        author_filter = ""
        if author_id is not None:
            author_filter = "AND m.user_id = :author_id"
            params["author_id"] = author_id

        async with self._session_factory() as session:
            result = await session.execute(
                text(_SEARCH_SQL.format(author_filter=author_filter)), params
            )
            ids = [row[0] for row in result.fetchall()]
            if not ids:
                return []

            models = await session.exec(
                select(MessageModel).where(col(MessageModel.id).in_(ids))
            )
            by_id = {m.id: m for m in models.all()}

        logger.debug("FTS search %r returned %d messages", fts_query, len(ids))
        return [self._to_entity(by_id[i]) for i in ids if i in by_id]

    async def find_recent_by_channel(
        self,
        channel_id: str,
        limit: int = 50,
    ) -> list[Message]:
        """チャンネルの直近メッセージを取得する

        Args:
            channel_id: チャンネル ID
            limit: 取得する最大件数

        Returns:
            メッセージリスト（新しい順）
        """
        async with self._session_factory() as session:
            statement = (
                select(MessageModel)
                .where(MessageModel.channel_id == channel_id)
                .order_by(col(MessageModel.timestamp).desc())
                .limit(limit)
            )
            result = await session.exec(statement)
            return [self._to_entity(m) for m in result.all()]

    async def find_recent_by_user(
        self,
        user_id: str,
        guild_id: str,
        limit: int = 50,
    ) -> list[Message]:
        """ユーザーの直近の空でないメッセージを取得する

        Args:
            user_id: ユーザー ID
            guild_id: ギルド ID
            limit: 取得する最大件数

        Returns:
            メッセージリスト（新しい順）
        """
        async with self._session_factory() as session:
            statement = (
                select(MessageModel)
                .where(
                    MessageModel.user_id == user_id,
                    MessageModel.guild_id == guild_id,
                    MessageModel.content != "",
                )
                .order_by(col(MessageModel.timestamp).desc())
                .limit(limit)
            )
            result = await session.exec(statement)
            return [self._to_entity(m) for m in result.all()]

    async def find_by_channel_since(
        self,
        channel_id: str,
        since: datetime,
        limit: int = 500,
    ) -> list[Message]:
        """指定時刻以降のチャンネルメッセージを取得する

        Args:
            channel_id: チャンネル ID
            since: この時刻以降のメッセージを取得
            limit: 取得する最大件数

        Returns:
            メッセージリスト（古い順）
        """
        async with self._session_factory() as session:
            statement = (
                select(MessageModel)
                .where(
                    MessageModel.channel_id == channel_id,
                    MessageModel.timestamp >= to_storage(since),
                    MessageModel.content != "",
                )
                .order_by(col(MessageModel.timestamp).asc())
                .limit(limit)
            )
            result = await session.exec(statement)
            return [self._to_entity(m) for m in result.all()]

    async def find_by_guild_since(
        self,
        guild_id: str,
        since: datetime,
        limit: int = 500,
    ) -> list[Message]:
        """指定時刻以降のギルド全体のメッセージを取得する

        Args:
            guild_id: ギルド ID
            since: この時刻以降のメッセージを取得
            limit: 取得する最大件数

        Returns:
            メッセージリスト（古い順）
        """
        async with self._session_factory() as session:
            statement = (
                select(MessageModel)
                .where(
                    MessageModel.guild_id == guild_id,
                    MessageModel.timestamp >= to_storage(since),
                    MessageModel.content != "",
                )
                .order_by(col(MessageModel.timestamp).asc())
                .limit(limit)
            )
            result = await session.exec(statement)
            return [self._to_entity(m) for m in result.all()]

    async def get_guild_stats(self, guild_id: str) -> ArchiveStats:
        """ギルドのアーカイブ統計を取得する

        Args:
            guild_id: ギルド ID

        Returns:
            総メッセージ数・期間・投稿者数
        """
        async with self._session_factory() as session:
            statement = select(
                func.count(col(MessageModel.id)),
                func.min(MessageModel.timestamp),
                func.max(MessageModel.timestamp),
                func.count(distinct(MessageModel.user_id)),
            ).where(MessageModel.guild_id == guild_id)
            result = await session.exec(statement)
            total, earliest, latest, authors = result.one()

        return ArchiveStats(
            total_messages=total or 0,
            earliest=normalize_to_utc(earliest) if earliest else None,
            latest=normalize_to_utc(latest) if latest else None,
            unique_authors=authors or 0,
        )

    def _to_entity(self, model: MessageModel) -> Message:
        """モデルをエンティティに変換する

        Args:
            model: MessageModel インスタンス

        Returns:
            Message エンティティ
        """
        return Message(
            id=model.message_id,
            guild_id=model.guild_id,
            channel=Channel(id=model.channel_id, name=""),
            user=User(
                id=model.user_id,
                name=model.user_name,
                is_bot=model.user_is_bot,
            ),
            text=model.content,
            timestamp=normalize_to_utc(model.timestamp),
            mentions=json.loads(model.mentions) if model.mentions else [],
        )

    def _to_model(self, entity: Message) -> MessageModel:
        """エンティティをモデルに変換する

        Args:
            entity: Message エンティティ

        Returns:
            MessageModel インスタンス
        """
        return MessageModel(
            message_id=entity.id,
            guild_id=entity.guild_id,
            channel_id=entity.channel.id,
            user_id=entity.user.id,
            user_name=entity.user.label,
            user_is_bot=entity.user.is_bot,
            content=entity.text,
            timestamp=to_storage(entity.timestamp),
            mentions=json.dumps(entity.mentions),
        )
