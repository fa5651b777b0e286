"""Summarize recent Slack channel messages with a hosted chat-completion model."""

__version__ = "0.1.0"
