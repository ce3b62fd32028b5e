"""SQLite implementation of ProfileRepository."""

import json
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any

from sqlalchemy import and_, func, or_
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from recallbot.domain.entities import ProfileCandidate, UserProfile
from recallbot.infrastructure.persistence.datetime_utils import (
    normalize_to_utc,
    to_storage,
)
from recallbot.infrastructure.persistence.models import MessageModel, UserProfileModel


class SQLiteProfileRepository:
    """SQLite 版 ProfileRepository 実装

    プロフィールのリスト項目は JSON 文字列として保存する。
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        self._session_factory = session_factory

    async def save(self, profile: UserProfile) -> None:
        """プロフィールを保存する（upsert）

        Args:
            profile: 保存するプロフィール
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(UserProfileModel).where(
                    UserProfileModel.user_id == profile.user_id,
                    UserProfileModel.guild_id == profile.guild_id,
                )
            )
            model = result.first() or UserProfileModel(
                user_id=profile.user_id, guild_id=profile.guild_id
            )
            model.summary = profile.summary
            model.personality_traits = json.dumps(profile.personality_traits)
            model.favorite_games = json.dumps(profile.favorite_games)
            model.favorite_topics = json.dumps(profile.favorite_topics)
            model.communication_style = profile.communication_style
            model.notable_quotes = json.dumps(profile.notable_quotes)
            model.analyzed_at = (
                to_storage(profile.analyzed_at) if profile.analyzed_at else None
            )
            model.message_count_analyzed = profile.message_count_analyzed
            session.add(model)
            await session.commit()

    async def find_by_user_and_guild(
        self, user_id: str, guild_id: str
    ) -> UserProfile | None:
        """ユーザーとギルドでプロフィールを検索する

        Args:
            user_id: ユーザー ID
            guild_id: ギルド ID

        Returns:
            プロフィール（存在しない場合は None）
        """
        async with self._session_factory() as session:
            result = await session.exec(
                select(UserProfileModel).where(
                    UserProfileModel.user_id == user_id,
                    UserProfileModel.guild_id == guild_id,
                )
            )
            model = result.first()

        if model is None:
            return None

        return UserProfile(
            user_id=model.user_id,
            guild_id=model.guild_id,
            summary=model.summary,
            personality_traits=self._parse_json_list(model.personality_traits),
            favorite_games=self._parse_json_list(model.favorite_games),
            favorite_topics=self._parse_json_list(model.favorite_topics),
            communication_style=model.communication_style,
            notable_quotes=self._parse_json_list(model.notable_quotes),
            analyzed_at=normalize_to_utc(model.analyzed_at)
            if model.analyzed_at
            else None,
            message_count_analyzed=model.message_count_analyzed,
        )

    async def find_users_needing_profiles(
        self, guild_id: str, stale_before: datetime, min_messages: int
    ) -> list[ProfileCandidate]:
        """プロフィールの作成・更新が必要なユーザーを取得する

        ボット以外で空でないメッセージが min_messages 件以上あり、
        プロフィールが無いか stale_before より前に分析されたユーザーが対象。
        プロフィール未作成のユーザーを先に、メッセージ数の多い順に並べる。

        Args:
            guild_id: ギルド ID
            stale_before: これより前の分析を古いとみなす
            min_messages: 対象とする最小メッセージ数

        Returns:
            対象ユーザーのリスト
        """
        message_count = func.count(col(MessageModel.id))
        profile_id = func.max(col(UserProfileModel.id))
        statement = (
            select(MessageModel.user_id, message_count, profile_id)
            .select_from(MessageModel)
            .outerjoin(
                UserProfileModel,
                and_(
                    col(UserProfileModel.user_id) == col(MessageModel.user_id),
                    col(UserProfileModel.guild_id) == col(MessageModel.guild_id),
                ),
            )
            .where(
                MessageModel.guild_id == guild_id,
                MessageModel.content != "",
                col(MessageModel.user_is_bot).is_(False),
                or_(
                    col(UserProfileModel.id).is_(None),
                    col(UserProfileModel.analyzed_at).is_(None),
                    col(UserProfileModel.analyzed_at) < to_storage(stale_before),
                ),
            )
            .group_by(col(MessageModel.user_id))
            .having(message_count >= min_messages)
            .order_by(profile_id.is_not(None), message_count.desc())
        )
        async with self._session_factory() as session:
            rows = (await session.exec(statement)).all()

        return [
            ProfileCandidate(
                user_id=user_id, message_count=count, has_profile=existing is not None
            )
            for user_id, count, existing in rows
        ]

    @staticmethod
    def _parse_json_list(value: Any) -> list[str]:
        """JSON 文字列のリストをパースする

        壊れた値は空リストとして扱う。
        """
        if not value:
            return []
        try:
            parsed = json.loads(value)
        except (json.JSONDecodeError, TypeError):
            return []
        if not isinstance(parsed, list):
            return []
        return [str(item) for item in parsed]
