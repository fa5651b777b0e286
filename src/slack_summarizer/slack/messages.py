"""Fetch the raw text of recent messages from a Slack channel."""

from __future__ import annotations

import structlog
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

logger = structlog.get_logger()


class MessageFetcher:
    """Reads the most recent messages of a channel as plain text.

    Only the ``text`` field survives; author, timestamp and threading
    information are dropped.

    Args:
        client: A Slack ``WebClient``.
    """

    def __init__(self, client: WebClient) -> None:
        self._client = client

    def join(self, channel_id: str) -> bool:
        """Join *channel_id* so its history is readable.

        Joining a channel the bot is already in is a no-op on Slack's side.
        A failed join is logged and otherwise ignored; the history call that
        follows reports the real problem if the bot cannot read the channel.

        Returns:
            ``True`` if Slack accepted the join, ``False`` otherwise.
        """
        try:
            self._client.conversations_join(channel=channel_id)
        except SlackApiError as exc:
            logger.warning(
                "channel_join_failed",
                channel_id=channel_id,
                error=exc.response.get("error") if exc.response is not None else str(exc),
            )
            return False
        return True

    def fetch(self, channel_id: str, count: int) -> list[str]:
        """Return the text of up to *count* most recent messages.

        Messages keep the order Slack returns them in (newest first).  A
        missing or malformed ``messages`` list yields an empty result.

        Args:
            channel_id: Slack channel id.
            count: Maximum number of messages to request.

        Returns:
            Message texts.

        Raises:
            SlackApiError: If ``conversations.history`` fails.
        """
        self.join(channel_id)

        response = self._client.conversations_history(channel=channel_id, limit=count)
        raw_messages = response.get("messages")
        if not isinstance(raw_messages, list):
            logger.warning("channel_history_empty", channel_id=channel_id)
            return []

        texts: list[str] = []
        for message in raw_messages:
            text = message.get("text") if isinstance(message, dict) else None
            if isinstance(text, str):
                texts.append(text)

        logger.info("channel_history_fetched", channel_id=channel_id, message_count=len(texts))
        return texts
