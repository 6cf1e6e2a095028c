"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel, Field

from research.contracts import GeneratedReport, SearchSession, SelectableEntry


def _iso(moment) -> str:
    return moment.isoformat().replace("+00:00", "Z")


class SearchResultDTO(BaseModel):
    id: str
    title: str
    url: str
    snippet: str
    source_domain: str
    display_url: str | None = None
    cache_id: str | None = None
    included: bool

    @classmethod
    def from_entry(cls, entry: SelectableEntry) -> "SearchResultDTO":
        item = entry.payload
        return cls(
            id=entry.id,
            title=item.title,
            url=item.url,
            snippet=item.snippet,
            source_domain=item.source_domain,
            display_url=item.display_url,
            cache_id=item.cache_id,
            included=entry.included,
        )


class DocumentDTO(BaseModel):
    id: str
    filename: str
    size_label: str
    included: bool

    @classmethod
    def from_entry(cls, entry: SelectableEntry) -> "DocumentDTO":
        return cls(
            id=entry.id,
            filename=entry.payload.filename,
            size_label=entry.payload.size_label,
            included=entry.included,
        )


class SourceDTO(BaseModel):
    id: str
    url: str
    title: str
    included: bool

    @classmethod
    def from_entry(cls, entry: SelectableEntry) -> "SourceDTO":
        return cls(id=entry.id, url=entry.payload.url, title=entry.payload.title, included=entry.included)


class SessionDTO(BaseModel):
    original_query: str
    refined_query: str
    total_result_count: int
    issued_at: str

    @classmethod
    def from_session(cls, session: SearchSession) -> "SessionDTO":
        return cls(
            original_query=session.original_query,
            refined_query=session.refined_query,
            total_result_count=session.total_result_count,
            issued_at=_iso(session.issued_at),
        )


class ReportDTO(BaseModel):
    text: str
    generated_at: str

    @classmethod
    def from_report(cls, report: GeneratedReport) -> "ReportDTO":
        return cls(text=report.text, generated_at=_iso(report.generated_at))


class WorkspaceDTO(BaseModel):
    session: SessionDTO | None = None
    results: list[SearchResultDTO] = Field(default_factory=list)
    documents: list[DocumentDTO] = Field(default_factory=list)
    sources: list[SourceDTO] = Field(default_factory=list)
    total_selected: int = 0
    report: ReportDTO | None = None
    report_in_progress: bool = False

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any]) -> "WorkspaceDTO":
        session = snapshot["session"]
        report = snapshot["report"]
        return cls(
            session=SessionDTO.from_session(session) if session else None,
            results=[SearchResultDTO.from_entry(e) for e in snapshot["results"]],
            documents=[DocumentDTO.from_entry(e) for e in snapshot["documents"]],
            sources=[SourceDTO.from_entry(e) for e in snapshot["sources"]],
            total_selected=snapshot["total_selected"],
            report=ReportDTO.from_report(report) if report else None,
            report_in_progress=snapshot["report_in_progress"],
        )


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
