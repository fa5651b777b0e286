"""Command-line entry point for the Slack summarizer.

Every option overrides the stored config for this run and becomes the new
stored default afterwards.

Usage::

    slack-summarizer --slack-token xoxb-... --openai-token sk-... summarize general
    slack-summarizer --num-messages 50 summarize random
    slack-summarizer --channels-refill summarize new-channel
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog
from slack_sdk.errors import SlackApiError, SlackClientError

from slack_summarizer import __version__
from slack_summarizer.app import ConfigOverrides, configure_logging, run_summary
from slack_summarizer.config import ConfigStore, get_settings
from slack_summarizer.errors import SummarizerError

logger = structlog.get_logger()


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Returns:
        A configured :class:`argparse.ArgumentParser`.
    """
    parser = argparse.ArgumentParser(
        prog="slack-summarizer",
        description="Summarize the most recent messages of a Slack channel",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument("-s", "--slack-token", type=str, help="Set the Slack bot token")
    parser.add_argument("-o", "--openai-token", type=str, help="Set the OpenAI token")
    parser.add_argument("-r", "--request-url", type=str, help="Set the chat-completion request URL")
    parser.add_argument("-m", "--model", type=str, help="Set the model to summarize with")
    parser.add_argument(
        "-t",
        "--tokens",
        type=_positive_int,
        dest="max_tokens",
        help="Set the maximum number of output tokens",
    )
    parser.add_argument(
        "-n",
        "--num-messages",
        type=_positive_int,
        help="Set the number of messages to summarize",
    )
    parser.add_argument(
        "-c",
        "--channels-refill",
        action="store_true",
        help="Rebuild the channel name cache from Slack before resolving",
    )
    parser.add_argument(
        "--channels-cache",
        type=Path,
        help="Path of the channel name cache (default: next to the config file)",
    )

    subparsers = parser.add_subparsers(dest="command")
    summarize = subparsers.add_parser(
        "summarize",
        help="Summarize the most recent messages sent in a Slack channel",
    )
    summarize.add_argument("channel", help="The name of the channel to summarize")

    return parser


def overrides_from_args(args: argparse.Namespace) -> ConfigOverrides:
    return ConfigOverrides(
        slack_token=args.slack_token,
        openai_token=args.openai_token,
        request_url=args.request_url,
        model=args.model,
        max_tokens=args.max_tokens,
        num_messages=args.num_messages,
    )


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, run the summary, and exit non-zero on any failure."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level, json_output=settings.log_json)

    store = ConfigStore(settings.config_path)
    cache_path = args.channels_cache or settings.channels_cache_path
    channel = args.channel if args.command == "summarize" else None

    try:
        run_summary(
            store,
            cache_path,
            overrides_from_args(args),
            channel=channel,
            force_refill=args.channels_refill,
        )
    except SummarizerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)
    except SlackApiError as exc:
        logger.error("slack_api_failed", error=exc.response.get("error"))
        print(f"error: Slack API call failed: {exc.response.get('error')}", file=sys.stderr)
        sys.exit(1)
    except (SlackClientError, OSError) as exc:
        print(f"error: Slack request failed: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
