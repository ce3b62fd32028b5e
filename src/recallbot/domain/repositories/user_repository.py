"""User repository protocol."""

from typing import Protocol

from recallbot.domain.entities import User, UserIdentity


class UserRepository(Protocol):
    """ユーザーリポジトリの抽象インターフェース"""

    async def save(self, user: User) -> None:
        """ユーザー情報を保存する（upsert）

        Args:
            user: 保存するユーザー
        """
        ...

    async def find_by_id(self, user_id: str) -> User | None:
        """ID でユーザーを検索する

        Args:
            user_id: ユーザー ID

        Returns:
            ユーザー（存在しない場合は None）
        """
        ...

    async def add_nickname(self, user_id: str, guild_id: str, nickname: str) -> None:
        """ギルド内のニックネームを記録する

        同じニックネームが記録済みの場合は何もしない。

        Args:
            user_id: ユーザー ID
            guild_id: ギルド ID
            nickname: ニックネーム
        """
        ...

    async def find_all_with_nicknames(self, guild_id: str) -> list[UserIdentity]:
        """ボット以外の全ユーザーをニックネーム付きで取得する

        Args:
            guild_id: ニックネームを取得するギルド ID

        Returns:
            名前解決用の識別情報リスト
        """
        ...
