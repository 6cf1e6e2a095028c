from datetime import datetime, timezone

import pytest

from conftest import FakeCompletionClient
from models.errors import ConfigurationError, TransportError
from research.contracts import Collection, SearchResultItem, SearchSession
from research.report_composer import REPORT_MAX_TOKENS, ReportComposer, build_report_input

GENERATED_AT = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
HEADERS = [
    "RESEARCH REPORT REQUEST:",
    "SELECTED WEB SOURCES (",
    "ADDITIONAL USER DOCUMENTS (",
    "ADDITIONAL USER SOURCES (",
]


def _session():
    items = (
        SearchResultItem(id="1-a", title="IPCC summary", url="https://ipcc.ch/a.pdf", snippet="Warming", source_domain="ipcc.ch"),
        SearchResultItem(id="1-b", title="EU policy", url="https://europa.eu/b.pdf", snippet="Targets", source_domain="europa.eu"),
        SearchResultItem(id="1-c", title="US policy", url="https://epa.gov/c.pdf", snippet="Rules", source_domain="epa.gov"),
    )
    return SearchSession(original_query="climate policy 2024", refined_query="climate policy 2024 filetype:pdf", items=items)


def _header_positions(payload):
    return [payload.index(header) for header in HEADERS]


def test_empty_selection_still_has_four_sections_in_order(store):
    payload = build_report_input(None, store, GENERATED_AT)

    positions = _header_positions(payload)
    assert positions == sorted(positions)
    assert "SELECTED WEB SOURCES (0 items):" in payload
    assert "ADDITIONAL USER DOCUMENTS (0 items):" in payload
    assert "ADDITIONAL USER SOURCES (0 items):" in payload
    assert '- Original Query: ""' in payload


def test_payload_lists_only_selected_items(store):
    session = _session()
    store.replace_results(list(session.items))
    store.toggle(Collection.RESULTS, 2, True)
    store.toggle(Collection.RESULTS, 0, True)
    store.add_document("field-notes.pdf", 2 * 1024 * 1024)
    skipped = store.add_document("draft.docx", 100)
    store.toggle(Collection.DOCUMENTS, skipped.id, False)
    store.add_source("https://example.org/brief", "")

    payload = build_report_input(session, store, GENERATED_AT)

    assert '- Original Query: "climate policy 2024"' in payload
    assert '- Refined Query: "climate policy 2024 filetype:pdf"' in payload
    assert "- Report Generation Time: 2024-05-01T12:30:00Z" in payload
    assert "SELECTED WEB SOURCES (2 items):" in payload
    # session order, 1-indexed
    assert "1. IPCC summary\n   URL: https://ipcc.ch/a.pdf\n   Source: ipcc.ch\n   Snippet: Warming" in payload
    assert "2. US policy" in payload
    assert "EU policy" not in payload
    assert "ADDITIONAL USER DOCUMENTS (1 items):\n1. field-notes.pdf (2 MB)\n   Type: User-provided document" in payload
    assert "draft.docx" not in payload
    assert "1. https://example.org/brief\n   URL: https://example.org/brief\n   Type: User-provided source" in payload


def test_compose_is_deterministic(store, prompts):
    composer = ReportComposer(FakeCompletionClient(), prompts)
    session = _session()
    store.replace_results(list(session.items))
    store.select_all(Collection.RESULTS, True)

    assert composer.compose(session, store, GENERATED_AT) == composer.compose(session, store, GENERATED_AT)


def test_generate_sends_payload_with_report_instruction(store, prompts):
    client = FakeCompletionClient(responses=["# Report\n\nFindings."])
    store.add_source("https://example.org/a", "A")

    report = ReportComposer(client, prompts).generate(_session(), store)

    assert report.text == "# Report\n\nFindings."
    assert client.calls[0]["system"] == "REPORT INSTRUCTION"
    assert client.calls[0]["max_tokens"] == REPORT_MAX_TOKENS
    assert "ADDITIONAL USER SOURCES (1 items):" in client.calls[0]["content"]


def test_generate_propagates_transport_errors(store, prompts):
    client = FakeCompletionClient(error=TransportError("overloaded", status=529, provider="anthropic"))

    with pytest.raises(TransportError):
        ReportComposer(client, prompts).generate(_session(), store)


def test_generate_propagates_missing_credentials(store, prompts):
    client = FakeCompletionClient(api_key="your_claude_api_key_here")

    with pytest.raises(ConfigurationError):
        ReportComposer(client, prompts).generate(_session(), store)
    assert client.calls == []


def test_empty_completion_is_an_error(store, prompts):
    client = FakeCompletionClient(responses=["   "])

    with pytest.raises(TransportError):
        ReportComposer(client, prompts).generate(_session(), store)
