"""Failures raised at the document-store boundary."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for document-store failures. The transport cause stays chained."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class StoreConnectionError(StoreError):
    """The store (or its gateway) could not be reached."""


class QueryError(StoreError):
    """A document query failed."""


class SubmissionError(StoreError):
    """A document write or contract registration was rejected or failed."""
