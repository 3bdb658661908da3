"""
Per-document selection of candidates awaiting import.

Selection is keyed by filename and, within a document, by the structural
identity (date, amount, description). Entries that share an identity are
one togglable unit. Nothing here touches the server; the ledger is
handed to the committer as a whole.
"""

from typing import Iterable, Optional

from app.schemas.ingestion import AnnotatedCandidate, IngestionResult, RawCandidate


class SelectionLedger:

    def __init__(self, results: Optional[Iterable[IngestionResult]] = None):
        self._selected: dict[str, list[AnnotatedCandidate]] = {}
        if results is not None:
            self.initialize(results)

    def initialize(self, results: Iterable[IngestionResult]) -> None:
        """Select every non-duplicate candidate, leave duplicates unselected."""
        self._selected = {}
        for result in results:
            chosen: list[AnnotatedCandidate] = []
            seen = set()
            for candidate in result.candidates:
                if candidate.is_duplicate or candidate.identity_key in seen:
                    continue
                seen.add(candidate.identity_key)
                chosen.append(candidate)
            self._selected[result.filename] = chosen

    def _index_of(self, filename: str, candidate: RawCandidate) -> int:
        key = candidate.identity_key
        for i, entry in enumerate(self._selected.get(filename, [])):
            if entry.identity_key == key:
                return i
        return -1

    def toggle(self, filename: str, candidate: AnnotatedCandidate) -> bool:
        """Flip membership within one document. Returns the new state."""
        current = self._selected.setdefault(filename, [])
        index = self._index_of(filename, candidate)
        if index >= 0:
            del current[index]
            return False
        current.append(candidate)
        return True

    def is_selected(self, filename: str, candidate: RawCandidate) -> bool:
        return self._index_of(filename, candidate) >= 0

    def selected_for(self, filename: str) -> list[AnnotatedCandidate]:
        return list(self._selected.get(filename, []))

    def selected_count(self) -> int:
        return sum(len(entries) for entries in self._selected.values())

    def all_selected(self) -> list[AnnotatedCandidate]:
        """Union across documents, in document order then selection order."""
        return [c for entries in self._selected.values() for c in entries]

    def reset(self) -> None:
        self._selected = {}
