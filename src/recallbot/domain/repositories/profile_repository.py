"""Profile repository protocol."""

from datetime import datetime
from typing import Protocol

from recallbot.domain.entities import ProfileCandidate, UserProfile


class ProfileRepository(Protocol):
    """ユーザープロフィールリポジトリの抽象インターフェース"""

    async def save(self, profile: UserProfile) -> None:
        """プロフィールを保存する（upsert）

        Args:
            profile: 保存するプロフィール
        """
        ...

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
        ...

    async def find_users_needing_profiles(
        self, guild_id: str, stale_before: datetime, min_messages: int
    ) -> list[ProfileCandidate]:
        """プロフィールの作成・更新が必要なユーザーを取得する

        Args:
            guild_id: ギルド ID
            stale_before: これより前の分析を古いとみなす
            min_messages: 対象とする最小メッセージ数

        Returns:
            プロフィール未作成のユーザーが先、メッセージ数の多い順
        """
        ...
