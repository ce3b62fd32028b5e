"""Channel repository protocol."""

from typing import Protocol

from recallbot.domain.entities import Channel


class ChannelRepository(Protocol):
    """チャンネルリポジトリの抽象インターフェース"""

    async def save(self, channel: Channel) -> None:
        """チャンネル情報を保存する（upsert）

        名前が空のチャンネルで既存の名前を上書きしない。

        Args:
            channel: 保存するチャンネル
        """
        ...

    async def find_by_id(self, channel_id: str) -> Channel | None:
        """ID でチャンネルを検索する

        Args:
            channel_id: チャンネル ID

        Returns:
            チャンネル（存在しない場合は None）
        """
        ...
