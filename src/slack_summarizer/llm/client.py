"""HTTP client for an OpenAI-compatible chat-completion endpoint.

Sends one request per summary and returns the first choice's text.  There
is no retry: any transport failure, non-2xx status or malformed body is
raised as ``CompletionError``.
"""

from __future__ import annotations

import httpx
import structlog
from pydantic import ValidationError

from slack_summarizer.errors import CompletionError
from slack_summarizer.llm.models import ChatCompletionRequest, ChatCompletionResponse, ChatMessage
from slack_summarizer.llm.prompts import SUMMARY_SYSTEM_PROMPT, SUMMARY_TEMPERATURE, SUMMARY_TOP_P

logger = structlog.get_logger()

DEFAULT_TIMEOUT_SECONDS = 120.0


def build_summary_request(messages: list[str], model: str, max_tokens: int) -> ChatCompletionRequest:
    """Build the completion request for a batch of channel messages.

    The user message is every input text joined with newlines.  An empty
    batch still produces a request with an empty user message.
    """
    return ChatCompletionRequest(
        model=model,
        messages=[
            ChatMessage(role="system", content=SUMMARY_SYSTEM_PROMPT),
            ChatMessage(role="user", content="\n".join(messages)),
        ],
        temperature=SUMMARY_TEMPERATURE,
        top_p=SUMMARY_TOP_P,
        max_tokens=max_tokens,
    )


class CompletionClient:
    """Summarizes message batches through a chat-completion endpoint.

    Args:
        api_token: Bearer token for the provider.
        request_url: Full URL of the chat-completion endpoint.
        model: Model identifier sent with every request.
        max_tokens: Maximum number of output tokens.
        http_client: Optional pre-built ``httpx.Client``, left open on
            ``close()``; one with a default timeout is created and owned
            by the client when omitted.
    """

    def __init__(
        self,
        api_token: str,
        request_url: str,
        model: str,
        max_tokens: int,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._api_token = api_token
        self._request_url = request_url
        self._model = model
        self._max_tokens = max_tokens
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=DEFAULT_TIMEOUT_SECONDS)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> CompletionClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def summarize(self, messages: list[str]) -> str:
        """Ask the model to summarize *messages* and return its reply text.

        Args:
            messages: Raw message texts, in the order they were fetched.

        Returns:
            The content of the first completion choice.

        Raises:
            CompletionError: If the request fails or the response lacks the
                expected fields.
        """
        request = build_summary_request(messages, self._model, self._max_tokens)

        try:
            response = self._http.post(
                self._request_url,
                headers={"Authorization": f"Bearer {self._api_token}"},
                json=request.model_dump(mode="json"),
            )
        except httpx.HTTPError as exc:
            raise CompletionError(f"Completion request to {self._request_url} failed: {exc}") from exc

        if response.is_error:
            raise CompletionError(
                f"Completion endpoint returned HTTP {response.status_code}: {_error_detail(response)}"
            )

        try:
            parsed = ChatCompletionResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise CompletionError(f"Malformed completion response: {exc.error_count()} error(s)") from exc

        content = parsed.choices[0].message.content
        if content is None:
            raise CompletionError("Completion response has no message content")

        if parsed.usage is not None:
            logger.info(
                "completion_usage",
                model=self._model,
                prompt_tokens=parsed.usage.prompt_tokens,
                completion_tokens=parsed.usage.completion_tokens,
            )
        return content


def _error_detail(response: httpx.Response) -> str:
    """Extract a short error message from a failed completion response."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        return str(data["error"].get("message", ""))[:200]
    return response.text[:200]
