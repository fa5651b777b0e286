"""Slack Web API client factory."""

from __future__ import annotations

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

DEFAULT_TIMEOUT_SECONDS = 30


def create_slack_client(bot_token: str, timeout: int = DEFAULT_TIMEOUT_SECONDS) -> WebClient:
    """Create a ``WebClient`` authenticated with a bot token.

    Args:
        bot_token: Slack bot token (``xoxb-...``).
        timeout: Per-request timeout in seconds.

    Returns:
        A configured ``slack_sdk.WebClient``.
    """
    return WebClient(token=bot_token, timeout=timeout)


__all__ = ["SlackApiError", "create_slack_client"]
