"""Slack event handlers."""

import logging
from typing import Any

from slack_bolt.async_app import AsyncApp

from recallbot.application.services import FollowUpTracker
from recallbot.application.use_cases import QueryHandler
from recallbot.domain.entities import Message
from recallbot.domain.repositories import MessageRepository
from recallbot.domain.services import MessagingService
from recallbot.infrastructure.slack import SlackEventAdapter

logger = logging.getLogger(__name__)

APOLOGY_REPLY = "Something went wrong answering that. Try again in a bit."


def _unwrap_message_changed(event: dict[str, Any]) -> dict[str, Any]:
    """Extract inner message from message_changed event.

    Args:
        event: Slack message_changed event payload.

    Returns:
        Unwrapped message with channel and team from outer event.
    """
    inner_message = event.get("message", {})
    return {
        **inner_message,
        "channel": event.get("channel"),
        "team": inner_message.get("team") or event.get("team"),
    }


async def _apologize(messaging_service: MessagingService, channel_id: str) -> None:
    try:
        await messaging_service.send_message(channel_id, APOLOGY_REPLY)
    except Exception:
        logger.exception("Error sending apology to %s", channel_id)


def register_handlers(
    app: AsyncApp,
    query_handler: QueryHandler,
    follow_up_tracker: FollowUpTracker,
    event_adapter: SlackEventAdapter,
    messaging_service: MessagingService,
    bot_user_id: str,
    message_repository: MessageRepository,
) -> None:
    """Register Slack event handlers.

    Args:
        app: AsyncApp instance.
        query_handler: Use case answering questions and follow-ups.
        follow_up_tracker: Open conversation windows.
        event_adapter: Adapter for converting events to entities.
        messaging_service: Used to apologize when answering fails.
        bot_user_id: The bot's user ID.
        message_repository: Repository for archiving messages.
    """

    @app.event("app_mention")
    async def handle_app_mention(event: dict) -> None:
        """Handle app_mention events (no-op).

        This handler exists to acknowledge app_mention events and suppress
        slack-bolt warnings. The actual processing is done by handle_message
        which receives the same message event.
        """
        logger.debug("Received app_mention event: %s", event.get("ts"))

    @app.event("message")
    async def handle_message(event: dict) -> None:
        """Handle message events.

        Archives every message, applies edits and deletes, answers
        messages that mention the bot and routes other messages through
        follow-up detection.

        Args:
            event: Slack event payload.
        """
        subtype = event.get("subtype")
        logger.debug(
            "Processing message event: ts=%s, subtype=%s, channel=%s",
            event.get("ts"),
            subtype,
            event.get("channel"),
        )

        if subtype == "message_deleted":
            try:
                await message_repository.delete(
                    message_id=event.get("deleted_ts", ""),
                    channel_id=event.get("channel", ""),
                )
                logger.debug("Deleted message: %s", event.get("deleted_ts"))
            except Exception:
                logger.exception("Error deleting message")
            return

        if subtype == "message_changed":
            event_data = _unwrap_message_changed(event)
        elif subtype in {None, "bot_message", "thread_broadcast"}:
            event_data = event
        else:
            return

        try:
            message = await event_adapter.to_message(event_data)
        except Exception:
            logger.exception("Error converting event to message")
            return

        # Archive first (continue even if save fails)
        try:
            await message_repository.save(message)
        except Exception:
            logger.exception("Error saving message to DB")

        # Edits only update the archive
        if subtype == "message_changed":
            logger.debug("Updated message: %s", event_data.get("ts"))
            return

        if message.user.is_bot or message.user.id == bot_user_id:
            return

        if message.mentions_user(bot_user_id):
            logger.info("Received message with mention: %s", event.get("ts"))
            try:
                await query_handler.handle_question(message)
            except Exception:
                logger.exception("Error answering question")
                await _apologize(messaging_service, message.channel.id)
            return

        await _handle_possible_follow_up(message)

    async def _handle_possible_follow_up(message: Message) -> None:
        if not message.text.strip():
            return

        try:
            window = await follow_up_tracker.check_follow_up(
                message.channel.id, message.user.id, message.text
            )
        except Exception:
            logger.exception("Error checking follow-up")
            return
        if window is None:
            return

        # The last turn is this message itself
        history = window.history[:-1]
        try:
            await query_handler.handle_follow_up(message, history)
        except Exception:
            logger.exception("Error answering follow-up")
            await _apologize(messaging_service, message.channel.id)
