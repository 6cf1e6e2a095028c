from typing import Optional

import openai

from models.completion import CompletionResult, TokenUsage
from models.errors import TransportError
from utils.logger import get_logger

from .base_client import BaseCompletionClient

logger = get_logger(__name__)


class OpenAIClient(BaseCompletionClient):
    """
    A client for the OpenAI chat completions API.
    The system instruction goes in a system message, the user content in a user message.
    """

    provider = "openai"
    credential_name = "OpenAI API key"

    def __init__(self, api_key: Optional[str], model_name: str = "gpt-4o-mini", sdk_client=None, **kwargs):
        """
        Initialize the OpenAI client.

        Args:
            api_key: The OpenAI API key
            model_name: The name of the model to use (default: gpt-4o-mini)
            sdk_client: Pre-built openai.OpenAI instance (tests inject a fake)
            **kwargs: Additional keyword arguments
        """
        super().__init__(api_key, model_name, **kwargs)
        self._sdk_client = sdk_client

    @property
    def client(self):
        # Built lazily: the SDK refuses to construct without a key
        if self._sdk_client is None:
            self._sdk_client = openai.OpenAI(api_key=self.api_key, timeout=self.timeout_s)
        return self._sdk_client

    def _send(self, system_instruction: str, user_content: str, max_tokens: int, start_time: float) -> CompletionResult:
        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_content},
                ],
                max_tokens=max_tokens,
            )
        except openai.APIStatusError as e:
            logger.error(
                "OpenAI API returned an error status",
                extra={"extra_fields": {"status": e.status_code, "model": self.model_name}},
            )
            raise TransportError(e.message, status=e.status_code, provider=self.provider) from e
        except openai.OpenAIError as e:
            logger.error(
                f"OpenAI request failed: {e!s}",
                extra={"extra_fields": {"error_type": type(e).__name__}},
            )
            raise TransportError(str(e), provider=self.provider) from e

        if not response.choices:
            raise TransportError("Response has no choices", provider=self.provider)

        usage = getattr(response, "usage", None)
        return CompletionResult(
            text=(response.choices[0].message.content or "").strip(),
            provider=self.provider,
            model=getattr(response, "model", None) or self.model_name,
            latency_ms=self._measure_latency(start_time),
            token_usage=TokenUsage(
                prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
                completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
                total_tokens=getattr(usage, "total_tokens", 0) or 0,
            ),
            finish_reason=self._normalize_finish_reason(response.choices[0].finish_reason),
        )
