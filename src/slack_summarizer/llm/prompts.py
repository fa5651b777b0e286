"""System prompt and sampling parameters for channel summarization."""

SUMMARY_SYSTEM_PROMPT = (
    "You are a Slack summarizer bot. You must summarize the most recent messages "
    "sent in a Slack channel. The following are the messages:"
)

SUMMARY_TEMPERATURE = 0.75
SUMMARY_TOP_P = 0.75
