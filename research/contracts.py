"""Data contracts for the research workflow."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class Collection(str, Enum):
    """The three user-curated collections feeding a report."""

    RESULTS = "results"
    DOCUMENTS = "documents"
    SOURCES = "sources"


@dataclass(frozen=True)
class SearchResultItem:
    """Normalized item from the search provider."""

    id: str
    title: str
    url: str
    snippet: str = ""
    source_domain: str = ""
    display_url: str | None = None
    cache_id: str | None = None


@dataclass(frozen=True)
class UploadedDocument:
    """A file the user attached. Only its metadata reaches the report payload."""

    filename: str
    size_label: str
    file_handle: Any = field(default=None, repr=False, compare=False)


@dataclass(frozen=True)
class ManualSource:
    """A URL the user added by hand."""

    url: str
    title: str


@dataclass(frozen=True)
class SelectableEntry(Generic[T]):
    """A payload plus its inclusion flag. Replaced, never mutated."""

    id: str
    payload: T
    included: bool


@dataclass(frozen=True)
class SearchPage:
    """One page as returned by the search provider (items not yet normalized)."""

    items: list[dict[str, Any]]
    total_results_estimate: int = 0


@dataclass(frozen=True)
class SearchSession:
    """Result set and provenance of one search submission."""

    original_query: str
    refined_query: str
    items: tuple[SearchResultItem, ...] = ()
    issued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def total_result_count(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class GeneratedReport:
    text: str
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class ExportedArtifact:
    """A client-downloadable document."""

    filename: str
    content: bytes
    media_type: str
