"""設定管理モジュール"""

from recallbot.config.loader import (
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
)
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

__all__ = [
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "DatabaseConfig",
    "EnvironmentVariableError",
    "FollowUpConfig",
    "HealthConfig",
    "LLMConfig",
    "LoggingConfig",
    "PersonaConfig",
    "ProfileConfig",
    "QueryConfig",
    "RetryConfig",
    "SlackConfig",
    "expand_env_vars",
    "load_config",
]
