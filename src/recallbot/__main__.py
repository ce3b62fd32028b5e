"""アプリケーションのエントリポイント"""

import asyncio
import logging
import signal
import sys
from pathlib import Path

from recallbot.application.services import (
    ContextBuilder,
    FollowUpTracker,
    ProfileRefresher,
    UserDirectory,
    WindowSweeper,
)
from recallbot.application.use_cases import QueryHandler
from recallbot.config import ConfigError, LoggingConfig, load_config
from recallbot.infrastructure.http import HealthServer
from recallbot.infrastructure.llm import (
    LiteLLMAnswerGenerator,
    LLMClient,
    LLMContinuationClassifier,
    LLMProfileAnalyzer,
    SystemPrompts,
    UsageTracker,
)
from recallbot.infrastructure.persistence import (
    DatabaseManager,
    SQLiteChannelRepository,
    SQLiteLinkRepository,
    SQLiteMessageRepository,
    SQLiteProfileRepository,
    SQLiteQueryLogRepository,
    SQLiteSettingsRepository,
    SQLiteUsageRepository,
    SQLiteUserRepository,
)
from recallbot.infrastructure.slack import (
    SlackAppRunner,
    SlackChannelInitializer,
    SlackEventAdapter,
    SlackMessagingService,
    create_slack_app,
)
from recallbot.presentation import register_handlers

# Default logging for early startup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig | None) -> None:
    """Configure logging based on config.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        return

    root_logger = logging.getLogger()

    level = getattr(logging, config.level.upper(), logging.INFO)
    root_logger.setLevel(level)

    if root_logger.handlers:
        formatter = logging.Formatter(config.format)
        for handler in root_logger.handlers:
            handler.setFormatter(formatter)

    if config.loggers:
        for logger_name, logger_level in config.loggers.items():
            individual_logger = logging.getLogger(logger_name)
            individual_level = getattr(logging, logger_level.upper(), logging.INFO)
            individual_logger.setLevel(individual_level)
            logger.debug(
                "Set logger '%s' to level %s", logger_name, logger_level.upper()
            )


async def main() -> None:
    """アプリケーションを起動する"""
    config_path = Path("config.yaml")
    if not config_path.exists():
        logger.error("config.yaml not found")
        sys.exit(1)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        logger.error("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(config.logging)

    app = create_slack_app(config.slack)

    messaging_service = SlackMessagingService(app.client)
    bot_user_id = await messaging_service.get_bot_user_id()
    team_id = await messaging_service.get_team_id()
    logger.info("Bot user ID: %s (team %s)", bot_user_id, team_id)

    db_manager = DatabaseManager(config.database.database_path)
    await db_manager.create_tables()

    message_repository = SQLiteMessageRepository(db_manager.get_session)
    user_repository = SQLiteUserRepository(db_manager.get_session)
    channel_repository = SQLiteChannelRepository(db_manager.get_session)
    profile_repository = SQLiteProfileRepository(db_manager.get_session)
    link_repository = SQLiteLinkRepository(db_manager.get_session)
    settings_repository = SQLiteSettingsRepository(db_manager.get_session)
    query_log_repository = SQLiteQueryLogRepository(db_manager.get_session)
    usage_tracker = UsageTracker(SQLiteUsageRepository(db_manager.get_session))

    user_directory = UserDirectory(user_repository)
    event_adapter = SlackEventAdapter(
        client=app.client,
        user_repository=user_repository,
        channel_repository=channel_repository,
        default_team_id=team_id,
        user_directory=user_directory,
    )

    debug_llm_messages = bool(config.logging and config.logging.debug_llm_messages)
    system_prompts = SystemPrompts(settings_repository)
    answer_generator = LiteLLMAnswerGenerator(
        LLMClient(config.llm["default"], usage_tracker),
        config.persona,
        config.query,
        config.retry,
        system_prompts,
        debug_llm_messages=debug_llm_messages,
    )

    # Use classifier LLM config if available, otherwise use default
    classifier_llm_config = config.llm.get("classifier", config.llm["default"])
    continuation_classifier = LLMContinuationClassifier(
        LLMClient(classifier_llm_config, usage_tracker),
        max_retries=config.follow_up.classifier_max_retries,
        base_delay_seconds=config.follow_up.classifier_retry_base_delay_seconds,
    )

    follow_up_tracker = FollowUpTracker(
        settings_repository=settings_repository,
        classifier=continuation_classifier,
        config=config.follow_up,
    )

    context_builder = ContextBuilder(
        message_repository=message_repository,
        user_repository=user_repository,
        channel_repository=channel_repository,
        profile_repository=profile_repository,
        link_repository=link_repository,
        user_directory=user_directory,
        config=config.query,
    )

    query_handler = QueryHandler(
        messaging_service=messaging_service,
        context_builder=context_builder,
        answer_generator=answer_generator,
        follow_up_tracker=follow_up_tracker,
        message_repository=message_repository,
        query_log_repository=query_log_repository,
        config=config.query,
        bot_user_id=bot_user_id,
    )

    register_handlers(
        app,
        query_handler,
        follow_up_tracker,
        event_adapter,
        messaging_service,
        bot_user_id,
        message_repository,
    )

    # Sync channels from Slack at startup
    channel_initializer = SlackChannelInitializer(
        client=app.client,
        channel_repository=channel_repository,
    )
    await channel_initializer.sync_channels()

    window_sweeper = WindowSweeper(
        follow_up_tracker,
        interval_seconds=config.follow_up.sweep_interval_seconds,
    )

    profile_refresher: ProfileRefresher | None = None
    if config.profile.enabled:
        # Use profile LLM config if available, otherwise use default
        profile_llm_config = config.llm.get("profile", config.llm["default"])
        profile_refresher = ProfileRefresher(
            message_repository=message_repository,
            user_repository=user_repository,
            profile_repository=profile_repository,
            analyzer=LLMProfileAnalyzer(
                LLMClient(profile_llm_config, usage_tracker),
                config.persona,
                config.profile,
                system_prompts,
            ),
            config=config.profile,
            guild_id=team_id,
        )
    runner = SlackAppRunner(app, config.slack.app_token)

    logger.info("Starting %s...", config.persona.name)
    logger.info("Starting Socket Mode handler...")
    logger.info(
        "Starting follow-up window sweeper (interval: %.0fs)...",
        config.follow_up.sweep_interval_seconds,
    )

    runner_task = asyncio.create_task(runner.start())
    sweeper_task = asyncio.create_task(window_sweeper.start())
    background_tasks = [runner_task, sweeper_task]
    if profile_refresher is not None:
        logger.info(
            "Starting profile refresher (interval: %.0fh)...",
            config.profile.refresh_interval_hours,
        )
        background_tasks.append(asyncio.create_task(profile_refresher.start()))

    health_server: HealthServer | None = None
    if config.health.enabled:
        health_server = HealthServer(
            slack_runner=runner,
            db_manager=db_manager,
            follow_up_tracker=follow_up_tracker,
            window_sweeper=window_sweeper,
            port=config.health.port,
        )
        await health_server.start()

    # Setup signal handlers for graceful shutdown
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def shutdown_handler() -> None:
        logger.info("Received shutdown signal...")
        stop_event.set()

    loop.add_signal_handler(signal.SIGINT, shutdown_handler)
    loop.add_signal_handler(signal.SIGTERM, shutdown_handler)

    await stop_event.wait()

    logger.info("Shutting down...")

    await window_sweeper.stop()
    if profile_refresher is not None:
        await profile_refresher.stop()

    closed = await runner.close(timeout=5.0)
    if not closed:
        logger.warning("Runner close timed out, cancelling tasks...")

    for task in background_tasks:
        task.cancel()
    await asyncio.gather(*background_tasks, return_exceptions=True)

    if health_server is not None:
        await health_server.stop()

    await db_manager.close()

    logger.info("Shutdown complete")


def run() -> None:
    """Run the async main function."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
