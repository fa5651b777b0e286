"""Pydantic models for the OpenAI-compatible chat-completion wire format.

Only the fields the summarizer sends or reads are modelled; unknown
response fields are ignored.
"""

from pydantic import BaseModel, ConfigDict, Field


class ChatMessage(BaseModel):
    """A single chat message in a completion request or response."""

    model_config = ConfigDict(extra="ignore")

    role: str
    content: str | None = None


class ChatCompletionRequest(BaseModel):
    """Body of a ``POST /v1/chat/completions`` request."""

    model: str
    messages: list[ChatMessage]
    temperature: float = Field(ge=0.0, le=2.0)
    top_p: float = Field(ge=0.0, le=1.0)
    max_tokens: int = Field(gt=0)


class Choice(BaseModel):
    """One completion alternative returned by the model."""

    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: ChatMessage
    finish_reason: str | None = None


class Usage(BaseModel):
    """Token accounting reported by the provider, when present."""

    model_config = ConfigDict(extra="ignore")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionResponse(BaseModel):
    """Parsed completion response; at least one choice is required."""

    model_config = ConfigDict(extra="ignore")

    choices: list[Choice] = Field(min_length=1)
    usage: Usage | None = None
