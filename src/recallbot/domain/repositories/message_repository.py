"""Message repository protocol."""

from datetime import datetime
from typing import Protocol

from recallbot.domain.entities import ArchiveStats, Message


class MessageRepository(Protocol):
    """アーカイブ済みメッセージのリポジトリの抽象インターフェース

    メッセージの保存・全文検索・集計を抽象化し、
    永続化層の実装詳細を隠蔽する。
    """

    async def save(self, message: Message) -> None:
        """メッセージを保存する

        既存のメッセージ（同一の message_id, channel_id）が存在する場合は更新する。

        Args:
            message: 保存するメッセージ
        """
        ...

    async def delete(self, message_id: str, channel_id: str) -> None:
        """メッセージを削除する

        Args:
            message_id: メッセージ ID
            channel_id: チャンネル ID
        """
        ...

    async def find_by_id(self, message_id: str, channel_id: str) -> Message | None:
        """ID でメッセージを検索する

        Args:
            message_id: メッセージ ID
            channel_id: チャンネル ID

        Returns:
            メッセージ（存在しない場合は None）
        """
        ...

    async def search(
        self,
        guild_id: str,
        query: str,
        limit: int = 50,
        author_id: str | None = None,
    ) -> list[Message]:
        """ギルド内のメッセージを全文検索する

        Args:
            guild_id: ギルド ID
            query: 記号を除去済みの検索文字列
            limit: 取得する最大件数
            author_id: 指定した場合、この投稿者のメッセージに限定する

        Returns:
            メッセージリスト（検索バックエンドの関連度順）
        """
        ...

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
        ...

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
        ...

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
        ...

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
        ...

    async def get_guild_stats(self, guild_id: str) -> ArchiveStats:
        """ギルドのアーカイブ統計を取得する

        Args:
            guild_id: ギルド ID

        Returns:
            総メッセージ数・期間・投稿者数
        """
        ...
