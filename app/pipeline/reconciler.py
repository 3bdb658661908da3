"""
Duplicate reconciliation against the persisted ledger.

A candidate is a duplicate when a persisted transaction has the same
calendar date, the same amount at minor-unit precision and the exact same
description. Candidates have no id before import, so identity is purely
structural: two genuinely distinct purchases sharing all three keys are
indistinguishable here.
"""

from typing import Iterable, Sequence

from app.schemas.ingestion import CENT, AnnotatedCandidate, IdentityKey, RawCandidate
from app.schemas.transactions import PersistedTransaction


def persisted_key(tx: PersistedTransaction) -> IdentityKey:
    return (tx.transaction_date, tx.amount.quantize(CENT), tx.description)


class DuplicateReconciler:

    def __init__(self, existing: Iterable[PersistedTransaction]):
        # One snapshot per batch; reconcile() is then a pure lookup
        self._keys = {persisted_key(tx) for tx in existing}

    def is_duplicate(self, candidate: RawCandidate) -> bool:
        return candidate.identity_key in self._keys

    def reconcile(self, candidates: Sequence[RawCandidate]) -> list[AnnotatedCandidate]:
        """Annotate candidates, preserving input order."""
        return [
            AnnotatedCandidate(**c.model_dump(exclude={"is_duplicate"}), is_duplicate=self.is_duplicate(c))
            for c in candidates
        ]


def reconcile(
    candidates: Sequence[RawCandidate],
    existing: Iterable[PersistedTransaction],
) -> list[AnnotatedCandidate]:
    return DuplicateReconciler(existing).reconcile(candidates)
