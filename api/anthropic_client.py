from typing import Optional

import anthropic

from models.completion import CompletionResult, TokenUsage
from models.errors import TransportError
from utils.logger import get_logger

from .base_client import BaseCompletionClient

logger = get_logger(__name__)


class AnthropicClient(BaseCompletionClient):
    """
    A client for the Anthropic Messages API.
    The system instruction goes in the `system` field, the user content in a single user message.
    """

    provider = "anthropic"
    credential_name = "Claude API key"

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "claude-3-5-sonnet-20241022",
        sdk_client=None,
        **kwargs,
    ):
        """
        Initialize the Anthropic client.

        Args:
            api_key: The Claude API key
            model_name: The name of the model to use
            sdk_client: Pre-built anthropic.Anthropic instance (tests inject one)
            **kwargs: Additional keyword arguments
        """
        super().__init__(api_key, model_name, **kwargs)
        self._sdk_client = sdk_client

    @property
    def client(self):
        # Built lazily; one attempt per call, failures surface to the caller
        if self._sdk_client is None:
            self._sdk_client = anthropic.Anthropic(
                api_key=self.api_key, timeout=self.timeout_s, max_retries=0
            )
        return self._sdk_client

    def _send(self, system_instruction: str, user_content: str, max_tokens: int, start_time: float) -> CompletionResult:
        try:
            response = self.client.messages.create(
                model=self.model_name,
                system=system_instruction,
                messages=[{"role": "user", "content": user_content}],
                max_tokens=max_tokens,
            )
        except anthropic.APIStatusError as e:
            logger.error(
                "Claude API returned an error status",
                extra={"extra_fields": {"status": e.status_code, "model": self.model_name}},
            )
            raise TransportError(e.message, status=e.status_code, provider=self.provider) from e
        except anthropic.AnthropicError as e:
            logger.error(
                f"Claude request failed: {e!s}",
                extra={"extra_fields": {"error_type": type(e).__name__}},
            )
            raise TransportError(str(e), provider=self.provider) from e

        content = getattr(response, "content", None)
        if not isinstance(content, list):
            raise TransportError("Response has no content blocks", provider=self.provider)

        # content[0] is the text block for a plain (tool-free) request
        text = getattr(content[0], "text", None) if content else None
        usage = getattr(response, "usage", None)

        return CompletionResult(
            text=(text or "").strip(),
            provider=self.provider,
            model=getattr(response, "model", None) or self.model_name,
            latency_ms=self._measure_latency(start_time),
            token_usage=TokenUsage(
                prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
                completion_tokens=getattr(usage, "output_tokens", 0) or 0,
            ),
            finish_reason=self._normalize_finish_reason(getattr(response, "stop_reason", None)),
        )
