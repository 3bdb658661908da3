"""
Prometheus metrics for the statement import service.
"""

from prometheus_client import Counter, Histogram


# ── Ingestion ────────────────────────────────────────────────
documents_ingested_total = Counter(
    "documents_ingested_total",
    "Total documents submitted for ingestion",
    ["outcome"],
)

ingestion_batch_duration_seconds = Histogram(
    "ingestion_batch_duration_seconds",
    "Time to decrypt, parse and reconcile one submitted batch",
    buckets=[0.1, 0.5, 1, 2, 5, 10, 30, 60],
)

# ── Decryption ───────────────────────────────────────────────
decryption_attempts_total = Counter(
    "decryption_attempts_total",
    "Credential attempts made against protected documents",
)

# ── Reconciliation ───────────────────────────────────────────
candidates_extracted_total = Counter(
    "candidates_extracted_total",
    "Candidate transactions extracted from statements",
    ["duplicate"],
)

# ── Import ───────────────────────────────────────────────────
transactions_imported_total = Counter(
    "transactions_imported_total",
    "Transactions committed to the ledger by import",
)

import_failures_total = Counter(
    "import_failures_total",
    "Import commits that were rejected or failed",
    ["error_code"],
)
