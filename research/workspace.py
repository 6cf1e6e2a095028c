"""Per-session coordinator tying search, curation, report and export together."""

import threading
from typing import Any

from models.errors import EmptySelectionError, NoReportError
from utils.logger import get_logger

from .contracts import Collection, ExportedArtifact, GeneratedReport, SearchSession
from .query_transformer import QueryTransformer
from .report_composer import ReportComposer
from .report_exporter import ReportExporter
from .search_gateway import SearchGateway
from .selection_store import SelectionStore

logger = get_logger(__name__)


class ResearchWorkspace:
    """
    One user's transient research session.

    A new search replaces the result set and clears any generated report;
    uploaded documents and manual sources are kept.
    """

    def __init__(
        self,
        transformer: QueryTransformer,
        gateway: SearchGateway,
        composer: ReportComposer,
        exporter: ReportExporter,
        store: SelectionStore | None = None,
    ):
        self.transformer = transformer
        self.gateway = gateway
        self.composer = composer
        self.exporter = exporter
        self.store = store or SelectionStore()

        self._lock = threading.Lock()
        self._session: SearchSession | None = None
        self._report: GeneratedReport | None = None
        self._report_in_progress = False

    @property
    def session(self) -> SearchSession | None:
        return self._session

    @property
    def report(self) -> GeneratedReport | None:
        return self._report

    @property
    def report_in_progress(self) -> bool:
        return self._report_in_progress

    def run_search(self, query: str, max_results: int | None = None) -> SearchSession:
        """
        Refine the query, fetch results and start a fresh session.

        Raises:
            ValueError: blank query or invalid max_results
            ConfigurationError / TransportError: from the search provider; the
                previous session is left untouched
        """
        query = (query or "").strip()
        if not query:
            raise ValueError("Query must not be blank")

        refined = self.transformer.transform(query)
        items = self.gateway.search(refined, max_results)

        session = SearchSession(original_query=query, refined_query=refined, items=tuple(items))
        with self._lock:
            self._session = session
            self._report = None
            self.store.replace_results(items)

        logger.info(
            "Search session started",
            extra={"extra_fields": {"refined_query": refined, "items": session.total_result_count}},
        )
        return session

    def generate_report(self) -> GeneratedReport | None:
        """
        Generate a report from the current selection.

        Returns None without doing anything when a generation is already running,
        and None when a new search replaced the session before the report came back.

        Raises:
            EmptySelectionError: nothing selected
            ConfigurationError / TransportError: from the completion provider
        """
        if self.store.total_selected() == 0:
            raise EmptySelectionError("Please select at least one item to generate a report.")

        with self._lock:
            if self._report_in_progress:
                logger.info("Report generation already in progress; ignoring trigger")
                return None
            self._report_in_progress = True
            session = self._session

        try:
            report = self.composer.generate(session, self.store)
        finally:
            with self._lock:
                self._report_in_progress = False

        with self._lock:
            # A search that landed mid-generation owns the workspace now
            if self._session is not session:
                logger.info("Session replaced during report generation; discarding report")
                return None
            self._report = report
        return report

    def export_report(self, fmt: str = "pdf") -> ExportedArtifact:
        report = self._report
        if report is None:
            raise NoReportError("No report has been generated yet")
        if fmt == "pdf":
            return self.exporter.export(report.text, report.generated_at)
        if fmt == "txt":
            return self.exporter.export_text(report.text, report.generated_at)
        raise ValueError(f"Unsupported export format '{fmt}'. Must be 'pdf' or 'txt'")

    def snapshot(self) -> dict[str, Any]:
        """Consistent read of everything a client renders."""
        with self._lock:
            session = self._session
            report = self._report
            in_progress = self._report_in_progress
        return {
            "session": session,
            "results": self.store.entries(Collection.RESULTS),
            "documents": self.store.entries(Collection.DOCUMENTS),
            "sources": self.store.entries(Collection.SOURCES),
            "total_selected": self.store.total_selected(),
            "report": report,
            "report_in_progress": in_progress,
        }
