import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from config.config import is_configured
from models.completion import CompletionResult
from models.errors import ConfigurationError
from utils.logger import get_logger

logger = get_logger(__name__)


class BaseCompletionClient(ABC):
    """
    Abstract base class for completion (language model) clients.

    Subclasses implement `_send`; `complete` checks the credential first so that a
    missing key is reported as a ConfigurationError before any network call.
    """

    provider: str = "unknown"
    credential_name: str = "API key"

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str,
        on_result: Optional[Callable[[CompletionResult], object]] = None,
        **kwargs,
    ):
        """
        Initialize the completion client.

        Args:
            api_key: API key for the service (may be missing; checked on use)
            model_name: Model identifier sent with every request
            on_result: Optional callback receiving every successful CompletionResult
            **kwargs: Additional provider-specific parameters
        """
        self.api_key = api_key
        self.model_name = model_name
        self.on_result = on_result
        self.timeout_s = kwargs.get('timeout_s', 60.0)

    def validate_credentials(self) -> None:
        """Raise ConfigurationError when the credential is missing or a placeholder."""
        if not is_configured(self.api_key):
            raise ConfigurationError(f"{self.credential_name} not configured")

    def complete(self, system_instruction: str, user_content: str, max_tokens: int = 4000) -> CompletionResult:
        """
        Send one system instruction plus one user message and return the model's text.

        Raises:
            ConfigurationError: credential missing, no call made
            TransportError: network failure, non-success status or malformed body
        """
        self.validate_credentials()

        start_time = time.time()
        result = self._send(system_instruction, user_content, max_tokens, start_time)

        logger.info(
            f"{self.provider} completion successful",
            extra={
                "extra_fields": {
                    "model": result.model,
                    "latency_ms": result.latency_ms,
                    "tokens": result.token_usage.total_tokens,
                    "finish_reason": result.finish_reason,
                }
            },
        )
        if self.on_result is not None:
            self.on_result(result)
        return result

    @abstractmethod
    def _send(self, system_instruction: str, user_content: str, max_tokens: int, start_time: float) -> CompletionResult:
        """Perform the provider call. Must raise TransportError on any failure."""

    @staticmethod
    def _measure_latency(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)

    @staticmethod
    def _normalize_finish_reason(reason: Optional[str]) -> Optional[str]:
        mapping = {
            "end_turn": "stop",
            "stop_sequence": "stop",
            "stop": "stop",
            "max_tokens": "length",
            "length": "length",
            "content_filter": "content_filter",
        }
        if reason is None:
            return None
        return mapping.get(reason, reason)
