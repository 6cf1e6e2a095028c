"""Serialize the curated selection and ask the completion model for a report."""

from datetime import datetime, timezone

from api.base_client import BaseCompletionClient
from models.errors import TransportError
from utils.logger import get_logger

from .contracts import Collection, GeneratedReport, SearchSession
from .prompts import PromptStore
from .selection_store import SelectionStore

logger = get_logger(__name__)

REPORT_MAX_TOKENS = 4000

CLOSING_REQUEST = (
    "Please generate a comprehensive research report based on these specifically "
    "selected sources and documents."
)


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def build_report_input(
    session: SearchSession | None,
    store: SelectionStore,
    generated_at: datetime,
) -> str:
    """
    Build the report request text.

    Always emits the four section headers in the same order, with "(0 items)"
    for empty sections, so the model sees one consistent structure.
    """
    results = store.selected(Collection.RESULTS)
    documents = store.selected(Collection.DOCUMENTS)
    sources = store.selected(Collection.SOURCES)

    lines = [
        "RESEARCH REPORT REQUEST:",
        f"- Original Query: \"{session.original_query if session else ''}\"",
        f"- Refined Query: \"{session.refined_query if session else ''}\"",
        f"- Report Generation Time: {_iso(generated_at)}",
        "",
        f"SELECTED WEB SOURCES ({len(results)} items):",
    ]
    for index, result in enumerate(results, start=1):
        lines.append(f"{index}. {result.title}")
        lines.append(f"   URL: {result.url}")
        lines.append(f"   Source: {result.source_domain}")
        lines.append(f"   Snippet: {result.snippet}")
    lines.append("")

    lines.append(f"ADDITIONAL USER DOCUMENTS ({len(documents)} items):")
    for index, document in enumerate(documents, start=1):
        lines.append(f"{index}. {document.filename} ({document.size_label})")
        lines.append("   Type: User-provided document")
    lines.append("")

    lines.append(f"ADDITIONAL USER SOURCES ({len(sources)} items):")
    for index, source in enumerate(sources, start=1):
        lines.append(f"{index}. {source.title}")
        lines.append(f"   URL: {source.url}")
        lines.append("   Type: User-provided source")
    lines.append("")

    lines.append(CLOSING_REQUEST)
    return "\n".join(lines)


class ReportComposer:
    """
    Turns the current selection into a synthesized report.

    Unlike query refinement there is no fallback: a report built from anything
    other than the user's selection would misrepresent it, so errors propagate.
    """

    def __init__(self, client: BaseCompletionClient, prompts: PromptStore):
        self.client = client
        self.prompts = prompts

    def compose(self, session: SearchSession | None, store: SelectionStore, generated_at: datetime | None = None) -> str:
        return build_report_input(session, store, generated_at or datetime.now(timezone.utc))

    def generate(self, session: SearchSession | None, store: SelectionStore) -> GeneratedReport:
        """
        Raises:
            ConfigurationError: completion credential missing
            TransportError: completion call failed or returned no text
        """
        generated_at = datetime.now(timezone.utc)
        payload = self.compose(session, store, generated_at)
        instruction = self.prompts.report_instruction()

        logger.info(
            "Generating report",
            extra={"extra_fields": {"selected": store.total_selected(), "payload_chars": len(payload)}},
        )
        result = self.client.complete(instruction, payload, max_tokens=REPORT_MAX_TOKENS)
        if result.is_empty:
            raise TransportError("Failed to generate report: empty response", provider=result.provider)

        return GeneratedReport(text=result.text, generated_at=generated_at)
