"""SQLite implementation of ChannelRepository."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from recallbot.domain.entities import Channel
from recallbot.infrastructure.persistence.models import ChannelModel


class SQLiteChannelRepository:
    """SQLite 版 ChannelRepository 実装"""

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        self._session_factory = session_factory

    async def save(self, channel: Channel) -> None:
        """チャンネル情報を保存する（upsert）

        名前が空の場合は既存の名前を残す。

        Args:
            channel: 保存するチャンネル
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(ChannelModel).where(ChannelModel.channel_id == channel.id)
            )
            existing = result.first()
            now = datetime.now(timezone.utc).replace(tzinfo=None)

            if existing:
                if not channel.name:
                    return
                existing.name = channel.name
                existing.updated_at = now
                session.add(existing)
            else:
                session.add(
                    ChannelModel(
                        channel_id=channel.id, name=channel.name, updated_at=now
                    )
                )

            await session.commit()

    async def find_by_id(self, channel_id: str) -> Channel | None:
        """ID でチャンネルを検索する

        Args:
            channel_id: チャンネル ID

        Returns:
            チャンネル（存在しない場合は None）
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(ChannelModel).where(ChannelModel.channel_id == channel_id)
            )
            model = result.first()
            if model is None:
                return None
            return Channel(id=model.channel_id, name=model.name)
