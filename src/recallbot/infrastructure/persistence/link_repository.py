"""SQLite implementation of LinkRepository."""

import re
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager

from sqlalchemy import or_
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from recallbot.domain.entities import LinkAnalysis
from recallbot.infrastructure.persistence.datetime_utils import (
    normalize_to_utc,
    to_storage,
)
from recallbot.infrastructure.persistence.models import LinkAnalysisModel

MIN_TERM_LENGTH = 3


def _search_terms(text: str) -> list[str]:
    cleaned = re.sub(r"[^\w\s]", "", text).strip()
    return [term for term in cleaned.split() if len(term) >= MIN_TERM_LENGTH]


class SQLiteLinkRepository:
    """SQLite 版 LinkRepository 実装"""

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        self._session_factory = session_factory

    async def save(self, link: LinkAnalysis) -> None:
        """分析済みリンクを保存する

        Args:
            link: 保存するリンク分析結果
        """
        async with self._session_factory() as session:
            session.add(
                LinkAnalysisModel(
                    url=link.url,
                    guild_id=link.guild_id,
                    channel_id=link.channel_id,
                    author_id=link.author_id,
                    message_id=link.message_id,
                    title=link.title,
                    summary=link.summary,
                    created_at=to_storage(link.created_at),
                )
            )
            await session.commit()

    async def search_by_guild(
        self, guild_id: str, text: str, limit: int = 10
    ) -> list[LinkAnalysis]:
        """ギルド内の分析済みリンクを語句で検索する

        3文字以上の語のいずれかがタイトル・要約・URL に部分一致する
        リンクを新しい順に返す。要約のないリンクは対象外。

        Args:
            guild_id: ギルド ID
            text: 検索対象の文章
            limit: 取得する最大件数

        Returns:
            リンク分析結果リスト（新しい順）
        """
        terms = _search_terms(text)
        if not terms:
            return []

        conditions = []
        for term in terms:
            pattern = f"%{term}%"
            conditions.extend(
                [
                    col(LinkAnalysisModel.title).like(pattern),
                    col(LinkAnalysisModel.summary).like(pattern),
                    col(LinkAnalysisModel.url).like(pattern),
                ]
            )

        async with self._session_factory() as session:
            statement = (
                select(LinkAnalysisModel)
                .where(
                    LinkAnalysisModel.guild_id == guild_id,
                    col(LinkAnalysisModel.summary).is_not(None),
                    or_(*conditions),
                )
                .order_by(col(LinkAnalysisModel.created_at).desc())
                .limit(limit)
            )
            result = await session.exec(statement)
            models = result.all()

        return [
            LinkAnalysis(
                url=m.url,
                guild_id=m.guild_id,
                channel_id=m.channel_id,
                author_id=m.author_id,
                message_id=m.message_id,
                title=m.title,
                summary=m.summary,
                created_at=normalize_to_utc(m.created_at),
            )
            for m in models
        ]
