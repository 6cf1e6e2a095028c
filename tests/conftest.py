import os
import tempfile

import pytest

# Keep test runs from writing into the project's logs/ directory
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "deepfastsearch-test-logs"))

from api.base_client import BaseCompletionClient  # noqa: E402
from models.completion import CompletionResult, TokenUsage  # noqa: E402
from models.errors import ConfigurationError, TransportError  # noqa: E402
from research.contracts import SearchPage  # noqa: E402
from research.prompts import PromptStore  # noqa: E402
from research.query_transformer import QueryTransformer  # noqa: E402
from research.report_composer import ReportComposer  # noqa: E402
from research.report_exporter import ReportExporter  # noqa: E402
from research.search_gateway import SearchGateway  # noqa: E402
from research.selection_store import SelectionStore  # noqa: E402
from research.workspace import ResearchWorkspace  # noqa: E402


class FakeCompletionClient(BaseCompletionClient):
    """Scripted completion client; records every call."""

    provider = "fake"

    def __init__(self, responses=None, error=None, api_key="test-key", on_send=None):
        super().__init__(api_key, "fake-model")
        self.responses = list(responses or ["ok"])
        self.error = error
        self.on_send = on_send
        self.calls = []

    def _send(self, system_instruction, user_content, max_tokens, start_time):
        self.calls.append(
            {"system": system_instruction, "content": user_content, "max_tokens": max_tokens}
        )
        if self.on_send is not None:
            self.on_send()
        if self.error is not None:
            raise self.error
        text = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return CompletionResult(
            text=text,
            provider=self.provider,
            model=self.model_name,
            latency_ms=1,
            token_usage=TokenUsage(prompt_tokens=10, completion_tokens=5),
            finish_reason="stop",
        )


def make_raw_item(rank: int, **overrides) -> dict:
    item = {
        "title": f"Result {rank}",
        "link": f"https://example.com/doc-{rank}.pdf",
        "snippet": f"Snippet for result {rank}",
        "displayLink": "example.com",
        "formattedUrl": f"https://example.com/doc-{rank}.pdf",
        "cacheId": f"cache{rank}",
    }
    item.update(overrides)
    return item


class FakeSearchProvider:
    """
    Serves `available` ranked items, page by page, like the real provider.

    Set `fail_on_call` to raise a TransportError on that (1-based) call.
    """

    def __init__(self, available=100, fail_on_call=None, configured=True):
        self.available = available
        self.fail_on_call = fail_on_call
        self.configured = configured
        self.calls = []

    def validate_credentials(self):
        if not self.configured:
            raise ConfigurationError("Google Search API key not configured")

    def search_page(self, query, start_index=1, page_size=10):
        self.calls.append({"query": query, "start_index": start_index, "page_size": page_size})
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise TransportError("quota exceeded", status=429, provider="google_search")
        remaining = max(0, self.available - (start_index - 1))
        count = min(page_size, remaining)
        items = [make_raw_item(start_index + i) for i in range(count)]
        return SearchPage(items=items, total_results_estimate=self.available)


@pytest.fixture
def prompts(tmp_path):
    (tmp_path / "SearchPrompt.txt").write_text("SEARCH INSTRUCTION", encoding="utf-8")
    (tmp_path / "ReportPrompt.txt").write_text("REPORT INSTRUCTION", encoding="utf-8")
    return PromptStore(tmp_path)


@pytest.fixture
def store():
    return SelectionStore()


@pytest.fixture
def search_provider():
    return FakeSearchProvider()


@pytest.fixture
def make_workspace(prompts):
    """Build a workspace around the given fakes."""

    def _make(completion=None, provider=None):
        completion = completion or FakeCompletionClient(responses=["refined query"])
        provider = provider or FakeSearchProvider()
        return ResearchWorkspace(
            transformer=QueryTransformer(completion, prompts),
            gateway=SearchGateway(provider, default_max_results=10),
            composer=ReportComposer(completion, prompts),
            exporter=ReportExporter(product_name="DeepFastSearch"),
        )

    return _make


@pytest.fixture
def mock_env(monkeypatch):
    """Fixture to mock environment variables for testing."""
    env_vars = {
        "MODEL_TYPE": "anthropic",
        "CLAUDE_API_KEY": "test-claude-key",
        "GOOGLE_SEARCH_API_KEY": "test-google-key",
        "GOOGLE_SEARCH_ENGINE_ID": "test-cx",
        "MAX_RESULTS": "20",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars
