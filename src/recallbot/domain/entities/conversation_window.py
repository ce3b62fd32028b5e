"""Conversation window entity for follow-up detection."""

from dataclasses import dataclass, field
from enum import Enum


class TurnRole(Enum):
    """発話者の種別"""

    ASKER = "asker"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ConversationTurn:
    """会話の1発話"""

    role: TurnRole
    content: str


def window_key(channel_id: str, user_id: str) -> str:
    """ウィンドウを識別するキーを返す

    Args:
        channel_id: チャンネル ID
        user_id: ユーザー ID

    Returns:
        "channel_id:user_id" 形式のキー
    """
    return f"{channel_id}:{user_id}"


@dataclass
class ConversationWindow:
    """フォローアップ会話ウィンドウ

    回答直後に (チャンネル, ユーザー) 単位で開かれ、メンションなしの
    続きの発言を会話の一部として扱うための短命な状態。プロセス内にのみ
    保持され、永続化されない。

    時刻はすべて FollowUpTracker の clock（単調増加の秒数）で表す。

    Attributes:
        channel_id: チャンネル ID
        user_id: 質問したユーザーの ID
        original_question: ウィンドウを開いた質問
        original_answer: その質問への回答
        history: 発話履歴（古い順）
        created_at: 作成時刻
        last_activity_at: 最終アクティビティ時刻
        last_classified_at: 最後に継続判定を行った時刻（未判定なら None）
        follow_up_count: 受理したフォローアップ数
    """

    channel_id: str
    user_id: str
    original_question: str
    original_answer: str
    created_at: float
    last_activity_at: float
    history: list[ConversationTurn] = field(default_factory=list)
    last_classified_at: float | None = None
    follow_up_count: int = 0

    @property
    def key(self) -> str:
        """ウィンドウのキー"""
        return window_key(self.channel_id, self.user_id)

    def idle_seconds(self, now: float) -> float:
        """最終アクティビティからの経過秒数"""
        return now - self.last_activity_at

    def is_expired(self, now: float, ttl_seconds: float) -> bool:
        """TTL を超えて放置されているか判定する"""
        return self.idle_seconds(now) > ttl_seconds

    def is_exhausted(self, max_follow_ups: int) -> bool:
        """フォローアップ上限に達しているか判定する"""
        return self.follow_up_count >= max_follow_ups

    def in_cooldown(self, now: float, min_interval_seconds: float) -> bool:
        """前回の判定から最小間隔が経過していないか判定する"""
        if self.last_classified_at is None:
            return False
        return now - self.last_classified_at < min_interval_seconds

    def accept_follow_up(self, content: str, now: float) -> None:
        """継続と判定された発言を取り込む"""
        self.follow_up_count += 1
        self.last_activity_at = now
        self.history.append(ConversationTurn(TurnRole.ASKER, content))

    def record_answer(self, content: str, now: float) -> None:
        """アシスタントの回答を履歴に追加する"""
        self.history.append(ConversationTurn(TurnRole.ASSISTANT, content))
        self.last_activity_at = now

    def recent_turns(self, count: int) -> list[ConversationTurn]:
        """直近 count 件の発話を返す"""
        if count <= 0:
            return []
        return self.history[-count:]
