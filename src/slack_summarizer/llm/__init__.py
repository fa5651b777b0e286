"""Chat-completion integration for the summarizer.

Provides the HTTP completion client, pydantic request/response models and
the fixed summarization prompt.
"""

from slack_summarizer.llm.client import CompletionClient
from slack_summarizer.llm.models import ChatCompletionRequest, ChatCompletionResponse, ChatMessage
from slack_summarizer.llm.prompts import SUMMARY_SYSTEM_PROMPT, SUMMARY_TEMPERATURE, SUMMARY_TOP_P

__all__ = [
    "SUMMARY_SYSTEM_PROMPT",
    "SUMMARY_TEMPERATURE",
    "SUMMARY_TOP_P",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "CompletionClient",
]
