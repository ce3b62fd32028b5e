"""YAML設定ファイルの読み込みと環境変数展開"""

import dataclasses
import os
import re
from pathlib import Path
from typing import Any, TypeVar

import yaml

from recallbot.config.models import (
    Config,
    DatabaseConfig,
    FollowUpConfig,
    HealthConfig,
    LLMConfig,
    LoggingConfig,
    PersonaConfig,
    ProfileConfig,
    QueryConfig,
    RetryConfig,
    SlackConfig,
)

T = TypeVar("T")


class ConfigError(Exception):
    """設定関連の基底例外"""


class ConfigValidationError(ConfigError):
    """設定値のバリデーションエラー"""


class EnvironmentVariableError(ConfigError):
    """環境変数が見つからないエラー"""


# 環境変数パターン: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """文字列中の ${VAR_NAME} を環境変数の値に置換する

    Args:
        value: 置換対象の文字列

    Returns:
        環境変数が展開された文字列

    Raises:
        EnvironmentVariableError: 環境変数が未設定
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """データ構造を再帰的に走査し、文字列中の環境変数を展開する

    Args:
        data: 展開対象のデータ（dict, list, str, その他）

    Returns:
        環境変数が展開されたデータ
    """
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """必須フィールドの存在を検証する

    Args:
        data: 検証対象のdict
        field: フィールド名
        parent: 親フィールド名（エラーメッセージ用）

    Returns:
        フィールドの値

    Raises:
        ConfigValidationError: フィールドが存在しない
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _load_optional_section(data: dict[str, Any], section: str, cls: type[T]) -> T:
    """省略可能なセクションをデータクラスに変換する

    セクションが存在しない場合はデフォルト値のインスタンスを返す。

    Args:
        data: 設定全体のdict
        section: セクション名
        cls: 変換先のデータクラス

    Returns:
        データクラスのインスタンス

    Raises:
        ConfigValidationError: 未知のキー、または dict 以外の値
    """
    section_data = data.get(section)
    if section_data is None:
        return cls()
    if not isinstance(section_data, dict):
        raise ConfigValidationError(f"Section '{section}' must be a mapping")

    known = {f.name for f in dataclasses.fields(cls)}  # type: ignore[arg-type]
    unknown = sorted(set(section_data) - known)
    if unknown:
        raise ConfigValidationError(
            f"Unknown field(s) in '{section}': {', '.join(unknown)}"
        )
    return cls(**section_data)


def load_config(path: str | Path) -> Config:
    """設定ファイルを読み込む

    Args:
        path: config.yaml のパス

    Returns:
        Config オブジェクト

    Raises:
        FileNotFoundError: ファイルが存在しない
        ConfigValidationError: 必須項目が欠落
        EnvironmentVariableError: 環境変数が未設定
        yaml.YAMLError: YAML構文エラー
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f) or {}

    # 環境変数を展開
    data = _expand_recursive(raw_data)

    # 必須セクションの検証
    slack_data = _validate_required_field(data, "slack")
    llm_data = _validate_required_field(data, "llm")
    persona_data = _validate_required_field(data, "persona")
    database_data = _validate_required_field(data, "database")

    # SlackConfig
    slack = SlackConfig(
        bot_token=_validate_required_field(slack_data, "bot_token", "slack"),
        app_token=_validate_required_field(slack_data, "app_token", "slack"),
    )

    # LLMConfig (defaultは必須)
    _validate_required_field(llm_data, "default", "llm")
    llm: dict[str, LLMConfig] = {}
    for key, llm_item in llm_data.items():
        model = _validate_required_field(llm_item, "model", f"llm.{key}")
        llm[key] = LLMConfig(
            model=model,
            temperature=llm_item.get("temperature", 0.7),
            max_tokens=llm_item.get("max_tokens", 1000),
        )

    # PersonaConfig
    persona = PersonaConfig(
        name=_validate_required_field(persona_data, "name", "persona"),
        system_prompt=_validate_required_field(
            persona_data, "system_prompt", "persona"
        ),
    )

    # DatabaseConfig
    database = DatabaseConfig(
        database_path=_validate_required_field(
            database_data, "database_path", "database"
        ),
    )

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
            debug_llm_messages=logging_data.get("debug_llm_messages", False),
        )

    return Config(
        slack=slack,
        llm=llm,
        persona=persona,
        database=database,
        query=_load_optional_section(data, "query", QueryConfig),
        follow_up=_load_optional_section(data, "follow_up", FollowUpConfig),
        retry=_load_optional_section(data, "retry", RetryConfig),
        health=_load_optional_section(data, "health", HealthConfig),
        profile=_load_optional_section(data, "profile", ProfileConfig),
        logging=logging_config,
    )
