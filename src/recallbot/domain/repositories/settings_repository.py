"""Settings repository protocol."""

from typing import Protocol


class SettingsRepository(Protocol):
    """文字列キー・値の設定ストアの抽象インターフェース

    運用者が再起動なしで変更できる設定（フォローアップ設定など）を保持する。
    """

    async def get(self, key: str) -> str | None:
        """設定値を取得する

        Args:
            key: 設定キー

        Returns:
            設定値（未設定の場合は None）
        """
        ...

    async def set(self, key: str, value: str) -> None:
        """設定値を保存する

        Args:
            key: 設定キー
            value: 設定値
        """
        ...

    async def delete(self, key: str) -> bool:
        """設定値を削除する

        Args:
            key: 設定キー

        Returns:
            削除した場合 True、存在しなかった場合 False
        """
        ...

    async def get_all(self) -> dict[str, str]:
        """全設定を取得する

        Returns:
            キーと値の dict
        """
        ...
