import json
from types import SimpleNamespace

import anthropic
import httpx
import openai
import pytest

from api.anthropic_client import AnthropicClient
from api.google_search_client import GoogleSearchClient
from api.openai_client import OpenAIClient
from models.errors import ConfigurationError, TransportError


def _mock_http(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


def _anthropic_sdk(handler):
    return anthropic.Anthropic(api_key="sk-test", http_client=_mock_http(handler), max_retries=0)


def _message(text="  refined query \n"):
    return {
        "id": "msg_1",
        "type": "message",
        "role": "assistant",
        "model": "claude-test",
        "content": [{"type": "text", "text": text}],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 12, "output_tokens": 4},
    }


# -------------------------------------------------------------------
# Anthropic
# -------------------------------------------------------------------


def test_anthropic_sends_messages_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_message())

    results = []
    client = AnthropicClient(
        "sk-test", "claude-test", sdk_client=_anthropic_sdk(handler), on_result=results.append
    )

    result = client.complete("SYSTEM", "user text", max_tokens=4000)

    assert seen["path"] == "/v1/messages"
    assert seen["headers"]["x-api-key"] == "sk-test"
    assert seen["headers"]["anthropic-version"] == "2023-06-01"
    assert seen["body"] == {
        "model": "claude-test",
        "system": "SYSTEM",
        "messages": [{"role": "user", "content": "user text"}],
        "max_tokens": 4000,
    }
    assert result.text == "refined query"
    assert result.finish_reason == "stop"
    assert result.token_usage.total_tokens == 16
    assert results == [result]


@pytest.mark.parametrize("status", [401, 429, 500, 529])
def test_anthropic_error_status_is_transport_error(status):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(status, json={"type": "error", "error": {"type": "api_error", "message": "nope"}})

    client = AnthropicClient("sk-test", sdk_client=_anthropic_sdk(handler))

    with pytest.raises(TransportError) as exc_info:
        client.complete("SYSTEM", "user")

    assert exc_info.value.status == status
    assert exc_info.value.is_auth_failure is (status == 401)
    # single attempt, no retry
    assert len(calls) == 1


def test_anthropic_network_failure_is_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError):
        AnthropicClient("sk-test", sdk_client=_anthropic_sdk(handler)).complete("SYSTEM", "user")


def test_anthropic_response_without_content_is_transport_error():
    sdk = SimpleNamespace(
        messages=SimpleNamespace(create=lambda **kwargs: SimpleNamespace(content=None, usage=None))
    )

    with pytest.raises(TransportError):
        AnthropicClient("sk-test", sdk_client=sdk).complete("SYSTEM", "user")


def test_anthropic_unknown_stop_reason_is_kept_in_metadata():
    response = SimpleNamespace(
        model="claude-test",
        content=[SimpleNamespace(type="text", text="report")],
        stop_reason="refusal",
        usage=SimpleNamespace(input_tokens=1, output_tokens=1),
    )
    sdk = SimpleNamespace(messages=SimpleNamespace(create=lambda **kwargs: response))

    result = AnthropicClient("sk-test", sdk_client=sdk).complete("SYSTEM", "user")

    assert result.text == "report"
    assert result.finish_reason is None
    assert result.metadata["provider_finish_reason"] == "refusal"


@pytest.mark.parametrize("api_key", [None, "", "your_claude_api_key_here"])
def test_anthropic_missing_key_makes_no_request(api_key):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json=_message())

    with pytest.raises(ConfigurationError, match="Claude API key not configured"):
        AnthropicClient(api_key, sdk_client=_anthropic_sdk(handler)).complete("SYSTEM", "user")
    assert calls == []


# -------------------------------------------------------------------
# OpenAI
# -------------------------------------------------------------------


class _FakeCompletions:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def _fake_sdk(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def test_openai_maps_system_and_user_messages():
    response = SimpleNamespace(
        model="gpt-test",
        choices=[SimpleNamespace(message=SimpleNamespace(content=" report "), finish_reason="stop")],
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=2, total_tokens=5),
    )
    completions = _FakeCompletions(response=response)

    result = OpenAIClient("sk-test", "gpt-test", sdk_client=_fake_sdk(completions)).complete("SYS", "USER", 4000)

    assert completions.kwargs["messages"] == [
        {"role": "system", "content": "SYS"},
        {"role": "user", "content": "USER"},
    ]
    assert completions.kwargs["max_tokens"] == 4000
    assert result.text == "report"
    assert result.token_usage.total_tokens == 5


def test_openai_sdk_errors_become_transport_errors():
    completions = _FakeCompletions(error=openai.OpenAIError("socket closed"))

    with pytest.raises(TransportError):
        OpenAIClient("sk-test", sdk_client=_fake_sdk(completions)).complete("SYS", "USER")


def test_openai_empty_choices():
    response = SimpleNamespace(model="gpt-test", choices=[], usage=None)

    with pytest.raises(TransportError):
        OpenAIClient("sk-test", sdk_client=_fake_sdk(_FakeCompletions(response=response))).complete("S", "U")


# -------------------------------------------------------------------
# Google Custom Search
# -------------------------------------------------------------------


def test_google_search_page_params_and_parsing():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(
            200,
            json={
                "searchInformation": {"totalResults": "1234"},
                "items": [{"title": "A", "link": "https://a.example/x.pdf"}, "junk"],
            },
        )

    client = GoogleSearchClient("g-key", "cx-id", http_client=_mock_http(handler))

    page = client.search_page("solar filetype:pdf", start_index=11, page_size=25)

    assert seen["params"] == {
        "key": "g-key",
        "cx": "cx-id",
        "q": "solar filetype:pdf",
        "start": "11",
        "num": "10",
    }
    assert page.items == [{"title": "A", "link": "https://a.example/x.pdf"}]
    assert page.total_results_estimate == 1234


def test_google_search_without_items():
    client = GoogleSearchClient("g-key", "cx-id", http_client=_mock_http(lambda r: httpx.Response(200, json={})))

    page = client.search_page("q")

    assert page.items == []
    assert page.total_results_estimate == 0


def test_google_search_error_status():
    client = GoogleSearchClient(
        "g-key", "cx-id", http_client=_mock_http(lambda r: httpx.Response(403, json={"error": "quota"}))
    )

    with pytest.raises(TransportError) as exc_info:
        client.search_page("q")
    assert exc_info.value.is_auth_failure


@pytest.mark.parametrize(
    "api_key, engine_id, message",
    [
        (None, "cx-id", "Google Search API key not configured"),
        ("your_google_search_api_key_here", "cx-id", "Google Search API key not configured"),
        ("g-key", "", "Google Custom Search Engine ID not configured"),
    ],
)
def test_google_search_requires_credentials(api_key, engine_id, message):
    client = GoogleSearchClient(api_key, engine_id, http_client=_mock_http(lambda r: httpx.Response(200, json={})))

    with pytest.raises(ConfigurationError, match=message):
        client.search_page("q")
