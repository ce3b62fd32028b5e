"""設定データクラス"""

from dataclasses import dataclass, field


@dataclass
class SlackConfig:
    """Slack接続設定"""

    bot_token: str
    app_token: str


@dataclass
class LLMConfig:
    """LLM設定（LiteLLMのcompletionに渡すdict）"""

    model: str
    temperature: float = 0.7
    max_tokens: int = 1000


@dataclass
class PersonaConfig:
    """ペルソナ設定"""

    name: str
    system_prompt: str


@dataclass
class DatabaseConfig:
    """アーカイブDB設定"""

    database_path: str


@dataclass
class QueryConfig:
    """質問応答（コンテキスト構築）設定

    Attributes:
        default_search_limit: 通常モードの全文検索件数上限
        recall_search_limit: リコールモードの全文検索件数上限
        default_char_budget: 通常モードの relevant messages 文字数予算
        recall_char_budget: リコールモードの relevant messages 文字数予算
        default_max_tokens: 通常モードの回答トークン上限
        recall_max_tokens: リコールモードの回答トークン上限
        recent_message_limit: チャンネル直近メッセージの取得件数
        user_message_limit: メンションされたユーザーごとのメッセージ取得件数
        recall_sample_size: リコールモードで渡すサンプル数
        link_limit: 添付するリンク要約の最大件数
        reply_chunk_size: 返信1通あたりの最大文字数
    """

    default_search_limit: int = 30
    recall_search_limit: int = 200
    default_char_budget: int = 80_000
    recall_char_budget: int = 120_000
    default_max_tokens: int = 1500
    recall_max_tokens: int = 4000
    recent_message_limit: int = 50
    user_message_limit: int = 50
    recall_sample_size: int = 30
    link_limit: int = 10
    reply_chunk_size: int = 3900


@dataclass
class FollowUpConfig:
    """フォローアップ会話ウィンドウ設定

    enabled / window_seconds / max_follow_ups は設定ストアに値がない場合の
    デフォルト値。実行時は設定ストアの値が優先される。

    Attributes:
        enabled: フォローアップ検出のデフォルト有効/無効
        window_seconds: ウィンドウのTTL（最終アクティビティからの秒数）
        max_follow_ups: 1ウィンドウあたりのフォローアップ上限
        max_active_windows: 同時に保持するウィンドウ数の上限
        min_classify_interval_seconds: 同一ウィンドウの判定呼び出し最小間隔
        sweep_interval_seconds: 期限切れウィンドウ掃除の間隔
        classification_history_turns: 判定に渡す直近の発話数
        classifier_max_retries: 判定呼び出しのレート制限リトライ回数
        classifier_retry_base_delay_seconds: 判定呼び出しのリトライ基準待機秒数
    """

    enabled: bool = True
    window_seconds: int = 120
    max_follow_ups: int = 3
    max_active_windows: int = 500
    min_classify_interval_seconds: float = 5.0
    sweep_interval_seconds: float = 60.0
    classification_history_turns: int = 4
    classifier_max_retries: int = 1
    classifier_retry_base_delay_seconds: float = 2.0


@dataclass
class ProfileConfig:
    """ユーザープロフィール自動生成設定

    プロフィール生成は1回あたり数百件のメッセージを送るバックグラウンド処理のため、
    対話的な呼び出しより長いリトライ待機と呼び出し間隔を取る。

    Attributes:
        enabled: 定期生成の有効/無効
        startup_delay_seconds: 起動から初回生成までの待機秒数
        refresh_interval_hours: 定期生成の間隔
        stale_after_hours: これより古い分析を再生成の対象とする
        min_messages: プロフィールを作成する最小メッセージ数
        messages_per_profile: 分析に使う直近メッセージ数
        delay_between_builds_seconds: ユーザーごとの生成呼び出しの間隔
        max_retries: レート制限リトライ回数
        retry_base_delay_seconds: リトライ基準待機秒数
        max_tokens: 分析結果のトークン上限
    """

    enabled: bool = True
    startup_delay_seconds: float = 300.0
    refresh_interval_hours: float = 24.0
    stale_after_hours: float = 24.0
    min_messages: int = 10
    messages_per_profile: int = 500
    delay_between_builds_seconds: float = 15.0
    max_retries: int = 5
    retry_base_delay_seconds: float = 60.0
    max_tokens: int = 2048


@dataclass
class RetryConfig:
    """レート制限リトライ設定（対話的な回答生成用）"""

    max_retries: int = 3
    base_delay_seconds: float = 10.0


@dataclass
class HealthConfig:
    """ヘルスチェックサーバー設定"""

    enabled: bool = True
    port: int = 8080


@dataclass
class LoggingConfig:
    """ログ設定"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None
    debug_llm_messages: bool = False


@dataclass
class Config:
    """アプリケーション設定"""

    slack: SlackConfig
    llm: dict[str, LLMConfig]
    persona: PersonaConfig
    database: DatabaseConfig
    query: QueryConfig
    follow_up: FollowUpConfig
    retry: RetryConfig
    health: HealthConfig
    profile: ProfileConfig = field(default_factory=ProfileConfig)
    logging: LoggingConfig | None = None
