"""SQLite implementations of QueryLogRepository and UsageRepository."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlmodel.ext.asyncio.session import AsyncSession

from recallbot.domain.entities import QueryLogEntry
from recallbot.infrastructure.persistence.models import ApiCallModel, QueryLogModel


class SQLiteQueryLogRepository:
    """SQLite 版 QueryLogRepository 実装"""

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        self._session_factory = session_factory

    async def record(self, entry: QueryLogEntry) -> None:
        """回答ログを記録する

        Args:
            entry: 記録するログ
        """
        async with self._session_factory() as session:
            session.add(
                QueryLogModel(
                    guild_id=entry.guild_id,
                    channel_id=entry.channel_id,
                    asking_user_id=entry.asking_user_id,
                    question=entry.question,
                    answer=entry.answer,
                    model=entry.model,
                    input_tokens=entry.input_tokens,
                    output_tokens=entry.output_tokens,
                    response_time_ms=entry.response_time_ms,
                )
            )
            await session.commit()


class SQLiteUsageRepository:
    """SQLite 版 UsageRepository 実装"""

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        self._session_factory = session_factory

    async def record(
        self,
        call_type: str,
        model: str,
        input_tokens: int,
        output_tokens: int,
    ) -> None:
        """1回の呼び出しの使用量を記録する"""
        async with self._session_factory() as session:
            session.add(
                ApiCallModel(
                    call_type=call_type,
                    model=model,
                    input_tokens=input_tokens,
                    output_tokens=output_tokens,
                )
            )
            await session.commit()
