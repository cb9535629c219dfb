"""Ingestion error taxonomy."""

from typing import Optional


class IngestionError(Exception):
    """Base class for failures while acquiring a source."""

    def __init__(self, message: str, *, source_id: Optional[str] = None, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.source_id = source_id
        self.url = url


class NetworkFailure(IngestionError):
    """Timeout, DNS failure, refused connection or non-2xx response."""


class ParseFailure(IngestionError):
    """Malformed feed, HTML or JSON payload."""


class ValidationFailure(IngestionError):
    """Entry lacks a required field or was rejected by a filter."""
