"""Slack integration package for the summarizer.

Provides the ``WebClient`` factory, the channel-name directory with its
local JSON cache, and the channel message fetcher.
"""

from slack_summarizer.slack.client import create_slack_client
from slack_summarizer.slack.directory import ChannelDirectory
from slack_summarizer.slack.messages import MessageFetcher

__all__ = [
    "ChannelDirectory",
    "MessageFetcher",
    "create_slack_client",
]
