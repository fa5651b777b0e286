"""Exception classes for the Slack summarizer."""


class SummarizerError(Exception):
    """Base class for every error that aborts a summarizer run."""


class ConfigurationError(SummarizerError):
    """Raised when a required credential was never configured."""


class ConfigStoreError(SummarizerError):
    """Raised when the persisted config record cannot be read or written."""


class ChannelDirectoryError(SummarizerError):
    """Raised when the channel directory cannot be built or loaded."""


class ChannelNotFoundError(ChannelDirectoryError):
    """Raised when a channel name is absent from the directory.

    Attributes:
        channel_name: The display name that was looked up.
    """

    def __init__(self, channel_name: str) -> None:
        self.channel_name = channel_name
        super().__init__(f"Channel '{channel_name}' not found in the channel directory")


class CompletionError(SummarizerError):
    """Raised when the chat-completion endpoint fails or returns an unusable body."""
