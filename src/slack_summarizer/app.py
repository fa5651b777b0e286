"""Summarizer run flow: merge settings, fetch messages, summarize, persist.

The stored ``SummarizerConfig`` is loaded once, merged with the CLI
overrides into an immutable effective config, threaded through the Slack
and completion components, and saved back once at the end of a
successful run.

Configures:
- **structlog** with colored console (default) or JSON rendering on stderr
- **Channel directory** with its JSON cache beside the config record
- **Completion client** for the configured endpoint and model
"""

from __future__ import annotations

import logging
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TextIO

import httpx
import structlog
from pydantic import ValidationError
from slack_sdk import WebClient

from slack_summarizer.config import ConfigStore, SummarizerConfig
from slack_summarizer.errors import ChannelNotFoundError, ConfigurationError
from slack_summarizer.llm.client import CompletionClient
from slack_summarizer.slack.client import create_slack_client
from slack_summarizer.slack.directory import ChannelDirectory
from slack_summarizer.slack.messages import MessageFetcher

logger = structlog.get_logger()


def configure_logging(level: str = "WARNING", json_output: bool = False) -> None:
    """Configure structlog to write to stderr, leaving stdout for the summary.

    Args:
        level: Minimum log level name (``DEBUG``, ``INFO``, ...).  Validated by
            ``AppSettings.log_level``; an unknown name raises ``KeyError``.
        json_output: Render JSON lines instead of the colored console format.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    log_level = logging.getLevelNamesMapping()[level.upper()]

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service="slack-summarizer")


@dataclass(frozen=True)
class ConfigOverrides:
    """Per-run values given on the command line; ``None`` means not given."""

    slack_token: str | None = None
    openai_token: str | None = None
    request_url: str | None = None
    model: str | None = None
    max_tokens: int | None = None
    num_messages: int | None = None

    def as_update(self) -> dict[str, str | int]:
        return {k: v for k, v in asdict(self).items() if v is not None}


def resolve_config(stored: SummarizerConfig, overrides: ConfigOverrides) -> SummarizerConfig:
    """Merge CLI overrides over the stored record.

    Args:
        stored: The persisted config.
        overrides: Values given for this run.

    Returns:
        The effective config for the run.

    Raises:
        ConfigurationError: If a token is still its placeholder and was not
            overridden, or an override is invalid.
    """
    try:
        effective = SummarizerConfig.model_validate({**stored.model_dump(), **overrides.as_update()})
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
        raise ConfigurationError(f"Invalid value for: {fields}") from None

    if overrides.slack_token is None and not effective.slack_token_configured:
        raise ConfigurationError(
            "Slack token not found. Provide one with --slack-token. You only need to do this once."
        )
    if overrides.openai_token is None and not effective.openai_token_configured:
        raise ConfigurationError(
            "OpenAI token not found. Provide one with --openai-token. You only need to do this once."
        )
    return effective


def clean_summary(text: str) -> str:
    """Turn literal ``\\n`` sequences into newlines, drop backslashes, end with a newline."""
    return text.replace("\\n", "\n").replace("\\", "") + "\n"


def collect_messages(
    slack_client: WebClient,
    cache_path: Path,
    channel: str | None,
    num_messages: int,
    force_refill: bool = False,
) -> list[str]:
    """Fetch the messages to summarize, or an empty list when there are none.

    An unknown channel name is reported on stderr and yields an empty list.
    With no channel the directory is only touched when a refill is forced.
    """
    directory = ChannelDirectory(slack_client, cache_path)

    if channel is None:
        if force_refill:
            directory.refill()
        logger.warning("no_channel_given", detail="summarizing an empty message set")
        return []

    try:
        channel_id = directory.resolve(channel, force_refill=force_refill)
    except ChannelNotFoundError as exc:
        logger.warning("channel_not_found", channel=exc.channel_name)
        print(f"{exc}. Try --channels-refill if it was created recently.", file=sys.stderr)
        return []

    return MessageFetcher(slack_client).fetch(channel_id, num_messages)


def run_summary(
    store: ConfigStore,
    cache_path: Path,
    overrides: ConfigOverrides,
    channel: str | None = None,
    force_refill: bool = False,
    slack_client: WebClient | None = None,
    http_client: httpx.Client | None = None,
    out: TextIO | None = None,
) -> str:
    """Run one summarization and persist the effective config.

    Args:
        store: Persisted config store.
        cache_path: Channel directory cache file.
        overrides: CLI overrides for this run.
        channel: Channel display name, or ``None`` when no channel was given.
        force_refill: Rebuild the channel directory from Slack.
        slack_client: Injected ``WebClient``; built from the token otherwise.
        http_client: Injected ``httpx.Client`` for the completion endpoint.
        out: Stream the summary is printed to.  Defaults to stdout.

    Returns:
        The cleaned summary text that was printed.
    """
    effective = resolve_config(store.load(), overrides)

    if slack_client is None:
        slack_client = create_slack_client(effective.slack_token.get_secret_value())

    messages = collect_messages(
        slack_client,
        cache_path,
        channel,
        effective.num_messages,
        force_refill=force_refill,
    )

    with CompletionClient(
        api_token=effective.openai_token.get_secret_value(),
        request_url=effective.request_url,
        model=effective.model,
        max_tokens=effective.max_tokens,
        http_client=http_client,
    ) as completion:
        summary = completion.summarize(messages)

    cleaned = clean_summary(summary)
    print(cleaned, end="", file=out or sys.stdout)

    store.save(effective)
    logger.info("summary_completed", channel=channel, message_count=len(messages))
    return cleaned
