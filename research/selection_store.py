"""User curation state: three independent collections with per-item inclusion flags."""

import threading
import uuid
from dataclasses import replace
from typing import Any, Union

from utils.formatting import format_file_size
from utils.logger import get_logger

from .contracts import Collection, ManualSource, SearchResultItem, SelectableEntry, UploadedDocument

logger = get_logger(__name__)

EntryRef = Union[int, str]

# Payload type accepted by add() per user-editable collection
_ADDABLE = {
    Collection.DOCUMENTS: UploadedDocument,
    Collection.SOURCES: ManualSource,
}


class SelectionStore:
    """
    Thread-safe store for search results, uploaded documents and manual sources.

    Search results arrive unselected; documents and sources the user adds
    arrive selected. Every mutation touches exactly one collection. Entries are
    frozen and replaced on change, so snapshots handed to readers never shift.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[Collection, list[SelectableEntry]] = {c: [] for c in Collection}
        self._positions: dict[Collection, dict[str, int]] = {c: {} for c in Collection}

    # -- mutations -----------------------------------------------------------

    def replace_results(self, items: list[SearchResultItem]) -> None:
        """Install the results of a new search, all unselected. Other collections persist."""
        entries = [SelectableEntry(id=item.id, payload=item, included=False) for item in items]
        with self._lock:
            self._install(Collection.RESULTS, entries)

    def toggle(self, collection: Collection | str, ref: EntryRef, included: bool) -> SelectableEntry:
        """
        Set the inclusion flag of one entry.

        Args:
            collection: Target collection
            ref: Position (int) or entry id (str)
            included: New flag value

        Raises:
            IndexError: position out of range
            KeyError: unknown id
        """
        c = Collection(collection)
        with self._lock:
            pos = self._resolve(c, ref)
            entry = replace(self._entries[c][pos], included=included)
            self._entries[c][pos] = entry
        return entry

    def select_all(self, collection: Collection | str, included: bool) -> None:
        c = Collection(collection)
        with self._lock:
            # New list swapped in under the lock: no reader sees a half-updated state
            self._entries[c] = [replace(e, included=included) for e in self._entries[c]]

    def add(self, collection: Collection | str, payload: Any) -> SelectableEntry:
        c = Collection(collection)
        expected = _ADDABLE.get(c)
        if expected is None:
            raise ValueError(f"Entries cannot be added to '{c.value}'; they come from a search")
        if not isinstance(payload, expected):
            raise TypeError(f"'{c.value}' expects {expected.__name__}, got {type(payload).__name__}")

        with self._lock:
            entry = SelectableEntry(id=self._new_id(c), payload=payload, included=True)
            self._entries[c].append(entry)
            self._positions[c][entry.id] = len(self._entries[c]) - 1

        logger.info(f"Added {c.value} entry", extra={"extra_fields": {"id": entry.id}})
        return entry

    def add_document(self, filename: str, size_bytes: int, file_handle: Any = None) -> SelectableEntry:
        document = UploadedDocument(
            filename=filename,
            size_label=format_file_size(size_bytes),
            file_handle=file_handle,
        )
        return self.add(Collection.DOCUMENTS, document)

    def add_source(self, url: str, title: str = "") -> SelectableEntry:
        url = (url or "").strip()
        if not url:
            raise ValueError("Source URL must not be blank")
        title = (title or "").strip() or url
        return self.add(Collection.SOURCES, ManualSource(url=url, title=title))

    def remove(self, collection: Collection | str, item_id: str) -> SelectableEntry:
        c = Collection(collection)
        if c not in _ADDABLE:
            raise ValueError(f"Entries cannot be removed from '{c.value}'")
        with self._lock:
            pos = self._resolve(c, str(item_id))
            entries = list(self._entries[c])
            removed = entries.pop(pos)
            self._install(c, entries)
        return removed

    # -- reads ---------------------------------------------------------------

    def entries(self, collection: Collection | str) -> tuple[SelectableEntry, ...]:
        c = Collection(collection)
        with self._lock:
            return tuple(self._entries[c])

    def selected(self, collection: Collection | str) -> list[Any]:
        """Payloads of included entries, in collection order."""
        return [e.payload for e in self.entries(collection) if e.included]

    def count_selected(self, collection: Collection | str) -> int:
        return sum(1 for e in self.entries(collection) if e.included)

    def total_selected(self) -> int:
        with self._lock:
            return sum(1 for entries in self._entries.values() for e in entries if e.included)

    # -- internals (caller holds the lock) -----------------------------------

    def _install(self, c: Collection, entries: list[SelectableEntry]) -> None:
        self._entries[c] = entries
        self._positions[c] = {e.id: i for i, e in enumerate(entries)}

    def _resolve(self, c: Collection, ref: EntryRef) -> int:
        if isinstance(ref, bool):
            raise TypeError("Entry reference must be a position or an id")
        if isinstance(ref, int):
            if not 0 <= ref < len(self._entries[c]):
                raise IndexError(f"No {c.value} entry at position {ref}")
            return ref
        pos = self._positions[c].get(ref)
        if pos is None:
            raise KeyError(f"No {c.value} entry with id '{ref}'")
        return pos

    def _new_id(self, c: Collection) -> str:
        while True:
            candidate = uuid.uuid4().hex[:12]
            if candidate not in self._positions[c]:
                return candidate
