"""SQLModel table definitions."""

from datetime import datetime, timezone

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MessageModel(SQLModel, table=True):
    """メッセージテーブル

    content は FTS5 テーブル messages_fts の外部コンテンツとして
    トリガーで同期される。
    """

    __tablename__ = "messages"

    id: int | None = Field(default=None, primary_key=True)
    message_id: str = Field(index=True)
    guild_id: str = Field(index=True)
    channel_id: str = Field(index=True)
    user_id: str = Field(index=True)
    user_name: str
    user_is_bot: bool = False
    content: str
    timestamp: datetime = Field(index=True)
    mentions: str = ""  # JSON format: ["U123", "U456"]
    created_at: datetime = Field(default_factory=_utcnow)

    __table_args__ = (
        UniqueConstraint("message_id", "channel_id", name="uq_message_channel"),
    )


class UserModel(SQLModel, table=True):
    """ユーザーテーブル"""

    __tablename__ = "users"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(unique=True, index=True)
    name: str
    display_name: str | None = None
    is_bot: bool = False
    updated_at: datetime = Field(default_factory=_utcnow)


class UserNicknameModel(SQLModel, table=True):
    """ギルド内ニックネームテーブル"""

    __tablename__ = "user_nicknames"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    guild_id: str = Field(index=True)
    nickname: str
    created_at: datetime = Field(default_factory=_utcnow)

    __table_args__ = (
        UniqueConstraint("user_id", "guild_id", "nickname", name="uq_user_nickname"),
    )


class ChannelModel(SQLModel, table=True):
    """チャンネルテーブル"""

    __tablename__ = "channels"

    id: int | None = Field(default=None, primary_key=True)
    channel_id: str = Field(unique=True, index=True)
    name: str
    updated_at: datetime = Field(default_factory=_utcnow)


class UserProfileModel(SQLModel, table=True):
    """ユーザープロフィールテーブル

    リスト項目は JSON 文字列で保存する。
    """

    __tablename__ = "user_profiles"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    guild_id: str = Field(index=True)
    summary: str | None = None
    personality_traits: str = "[]"
    favorite_games: str = "[]"
    favorite_topics: str = "[]"
    communication_style: str | None = None
    notable_quotes: str = "[]"
    analyzed_at: datetime | None = None
    message_count_analyzed: int = 0

    __table_args__ = (
        UniqueConstraint("user_id", "guild_id", name="uq_profile_user_guild"),
    )


class LinkAnalysisModel(SQLModel, table=True):
    """リンク分析結果テーブル"""

    __tablename__ = "link_analyses"

    id: int | None = Field(default=None, primary_key=True)
    url: str = Field(index=True)
    guild_id: str = Field(index=True)
    channel_id: str
    author_id: str
    message_id: str
    title: str | None = None
    summary: str | None = None
    created_at: datetime = Field(default_factory=_utcnow, index=True)


class SettingModel(SQLModel, table=True):
    """設定テーブル（キー・値）"""

    __tablename__ = "settings"

    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(default_factory=_utcnow)


class QueryLogModel(SQLModel, table=True):
    """回答ログテーブル"""

    __tablename__ = "bot_queries"

    id: int | None = Field(default=None, primary_key=True)
    guild_id: str = Field(index=True)
    channel_id: str
    asking_user_id: str
    question: str
    answer: str
    model: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    response_time_ms: int | None = None
    created_at: datetime = Field(default_factory=_utcnow, index=True)


class ApiCallModel(SQLModel, table=True):
    """LLM 呼び出しのトークン使用量テーブル"""

    __tablename__ = "api_calls"

    id: int | None = Field(default=None, primary_key=True)
    call_type: str = Field(index=True)
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    created_at: datetime = Field(default_factory=_utcnow, index=True)
