"""
In-memory pipeline types.
"""

from dataclasses import dataclass


@dataclass
class SourceDocument:
    """An uploaded statement. Lives only for one ingestion request."""
    filename: str
    raw_bytes: bytes
    mime_type: str = "application/pdf"
