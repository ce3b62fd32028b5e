"""User profile entity."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class UserProfile:
    """ユーザープロフィール（事前に分析済みの人物像）

    Attributes:
        user_id: ユーザー ID
        guild_id: ギルド ID
        summary: 人物像の要約
        personality_traits: 性格の特徴
        favorite_games: よく話題にするゲーム
        favorite_topics: よく話題にするトピック
        communication_style: 話し方の特徴
        notable_quotes: 代表的な発言
        analyzed_at: 分析日時
        message_count_analyzed: 分析に使ったメッセージ数
    """

    user_id: str
    guild_id: str
    summary: str | None = None
    personality_traits: list[str] = field(default_factory=list)
    favorite_games: list[str] = field(default_factory=list)
    favorite_topics: list[str] = field(default_factory=list)
    communication_style: str | None = None
    notable_quotes: list[str] = field(default_factory=list)
    analyzed_at: datetime | None = None
    message_count_analyzed: int = 0


@dataclass(frozen=True)
class ProfileCandidate:
    """プロフィールの作成・更新が必要なユーザー

    Attributes:
        user_id: ユーザー ID
        message_count: ギルド内の空でないメッセージ数
        has_profile: 既存のプロフィールがあるか
    """

    user_id: str
    message_count: int
    has_profile: bool = False
