from datetime import datetime
from typing import Any

from models.completion import CompletionResult, TokenUsage


class TokenTracker:
    """
    Track token usage across completion calls (query refinement and report generation).
    Provider-agnostic: consumes the normalized TokenUsage of a CompletionResult.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        """Reset all token counters to zero."""
        self.total_prompt_tokens = 0
        self.total_completion_tokens = 0
        self.total_tokens = 0
        self.requests = 0

    def update(self, usage: TokenUsage | None) -> None:
        if usage is None:
            return

        self.requests += 1
        self.total_prompt_tokens += usage.prompt_tokens
        self.total_completion_tokens += usage.completion_tokens
        self.total_tokens += usage.total_tokens

    def record(self, result: CompletionResult) -> CompletionResult:
        """Update counters from a completion result and hand it back unchanged."""
        self.update(result.token_usage)
        return result

    def get_summary(self) -> dict[str, Any]:
        return {
            'requests': self.requests,
            'prompt_tokens': self.total_prompt_tokens,
            'completion_tokens': self.total_completion_tokens,
            'total_tokens': self.total_tokens,
            'timestamp': datetime.now().isoformat()
        }

    def format_summary(self) -> str:
        """
        Format the token usage summary as a human-readable string.

        Returns:
            A formatted string with token usage information.
        """
        stats = self.get_summary()
        return (
            f"Requests: {stats['requests']}\n"
            f"Prompt tokens: {stats['prompt_tokens']}\n"
            f"Completion tokens: {stats['completion_tokens']}\n"
            f"Total tokens: {stats['total_tokens']}"
        )
