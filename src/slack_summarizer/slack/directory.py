"""Channel directory: resolve Slack channel display names to channel ids.

The full name -> id mapping is either loaded verbatim from a local JSON
cache file or rebuilt by paginating ``conversations.list``.  A rebuild
always overwrites the cache.  The cache is only invalidated by an explicit
refill request.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

import structlog
from slack_sdk import WebClient

from slack_summarizer.errors import ChannelDirectoryError, ChannelNotFoundError

logger = structlog.get_logger()

PAGE_SIZE = 200
MAX_PAGES = 100


class ChannelDirectory:
    """Maps channel display names to ids, backed by a JSON cache file.

    Args:
        client: A Slack ``WebClient`` used when the directory is rebuilt.
        cache_path: Location of the JSON cache file.
    """

    def __init__(self, client: WebClient, cache_path: Path) -> None:
        self._client = client
        self._cache_path = cache_path

    @property
    def cache_path(self) -> Path:
        return self._cache_path

    def resolve(self, name: str, force_refill: bool = False) -> str:
        """Return the channel id for *name*.

        Uses the cache file when it exists unless *force_refill* is set, in
        which case the directory is rebuilt from Slack first.  Names are
        matched case-sensitively.

        Args:
            name: Channel display name, without the leading ``#``.
            force_refill: Ignore the cache and rebuild it from Slack.

        Returns:
            The opaque Slack channel id.

        Raises:
            ChannelNotFoundError: If *name* is not in the directory.
            ChannelDirectoryError: If the cache is unreadable or the listing
                does not terminate.
            SlackApiError: If ``conversations.list`` fails.
        """
        channels = self.load(force_refill=force_refill)
        try:
            return channels[name]
        except KeyError:
            raise ChannelNotFoundError(name) from None

    def load(self, force_refill: bool = False) -> dict[str, str]:
        """Return the whole name -> id mapping, from cache or freshly listed."""
        if not force_refill and self._cache_path.exists():
            return self._read_cache()
        return self.refill()

    def refill(self) -> dict[str, str]:
        """Rebuild the mapping from ``conversations.list`` and overwrite the cache."""
        channels = self._list_remote()
        self._write_cache(channels)
        logger.info(
            "channel_directory_refilled",
            channel_count=len(channels),
            cache_path=str(self._cache_path),
        )
        return channels

    def _list_remote(self) -> dict[str, str]:
        """Merge every page of ``conversations.list`` into one mapping.

        Follows ``response_metadata.next_cursor`` until Slack stops returning
        one.  A repeated cursor or more than ``MAX_PAGES`` pages aborts the
        listing instead of looping forever.
        """
        channels: dict[str, str] = {}
        seen_cursors: set[str] = set()
        cursor: str | None = None

        for page in range(1, MAX_PAGES + 1):
            response = self._client.conversations_list(
                limit=PAGE_SIZE,
                cursor=cursor,
                exclude_archived=True,
                types="public_channel",
            )
            for channel in response.get("channels") or []:
                channels[str(channel["name"])] = str(channel["id"])

            metadata = response.get("response_metadata") or {}
            cursor = metadata.get("next_cursor") or None
            logger.debug("channel_page_listed", page=page, has_more=cursor is not None)

            if cursor is None:
                return channels
            if cursor in seen_cursors:
                raise ChannelDirectoryError(
                    f"conversations.list repeated pagination cursor after {page} pages"
                )
            seen_cursors.add(cursor)

        raise ChannelDirectoryError(f"conversations.list did not finish within {MAX_PAGES} pages")

    def _read_cache(self) -> dict[str, str]:
        try:
            with open(self._cache_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise ChannelDirectoryError(
                f"Cannot read channel cache {self._cache_path}: {exc}"
            ) from exc

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise ChannelDirectoryError(
                f"Channel cache {self._cache_path} is not a name -> id mapping"
            )

        logger.debug("channel_cache_loaded", channel_count=len(data))
        return data

    def _write_cache(self, channels: dict[str, str]) -> None:
        tmp_path = self._cache_path.with_name(self._cache_path.name + ".tmp")
        try:
            self._cache_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(channels, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self._cache_path)
        except OSError as exc:
            raise ChannelDirectoryError(
                f"Cannot write channel cache {self._cache_path}: {exc}"
            ) from exc
