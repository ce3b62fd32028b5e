"""Query log and usage repository protocols."""

from typing import Protocol

from recallbot.domain.entities import QueryLogEntry


class QueryLogRepository(Protocol):
    """回答ログリポジトリの抽象インターフェース"""

    async def record(self, entry: QueryLogEntry) -> None:
        """回答ログを記録する

        Args:
            entry: 記録するログ
        """
        ...


class UsageRepository(Protocol):
    """LLM 呼び出しのトークン使用量リポジトリの抽象インターフェース"""

    async def record(
        self,
        call_type: str,
        model: str,
        input_tokens: int,
        output_tokens: int,
    ) -> None:
        """1回の呼び出しの使用量を記録する

        Args:
            call_type: 呼び出し種別（query, followup_check など）
            model: モデル名
            input_tokens: 入力トークン数
            output_tokens: 出力トークン数
        """
        ...
