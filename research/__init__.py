"""Research workflow for DeepFastSearch: refine, search, curate, report, export."""

from .contracts import (
    Collection,
    ExportedArtifact,
    GeneratedReport,
    ManualSource,
    SearchResultItem,
    SearchSession,
    SelectableEntry,
    UploadedDocument,
)

__all__ = [
    "Collection",
    "ExportedArtifact",
    "GeneratedReport",
    "ManualSource",
    "SearchResultItem",
    "SearchSession",
    "SelectableEntry",
    "UploadedDocument",
]
