"""Slack integration."""

from recallbot.infrastructure.slack.channel_initializer import SlackChannelInitializer
from recallbot.infrastructure.slack.client import SlackAppRunner, create_slack_app
from recallbot.infrastructure.slack.event_adapter import SlackEventAdapter
from recallbot.infrastructure.slack.messaging import SlackMessagingService

__all__ = [
    "SlackAppRunner",
    "SlackChannelInitializer",
    "SlackEventAdapter",
    "SlackMessagingService",
    "create_slack_app",
]
