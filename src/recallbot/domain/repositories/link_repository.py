"""Link analysis repository protocol."""

from typing import Protocol

from recallbot.domain.entities import LinkAnalysis


class LinkRepository(Protocol):
    """リンク分析結果リポジトリの抽象インターフェース"""

    async def save(self, link: LinkAnalysis) -> None:
        """分析済みリンクを保存する

        Args:
            link: 保存するリンク分析結果
        """
        ...

    async def search_by_guild(
        self, guild_id: str, text: str, limit: int = 10
    ) -> list[LinkAnalysis]:
        """ギルド内の分析済みリンクを語句で検索する

        Args:
            guild_id: ギルド ID
            text: 検索対象の文章（3文字以上の語で部分一致）
            limit: 取得する最大件数

        Returns:
            リンク分析結果リスト（新しい順）
        """
        ...
