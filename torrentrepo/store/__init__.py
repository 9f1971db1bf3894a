"""Document-store boundary: protocol, types, errors and the HTTP gateway adapter."""

from .errors import QueryError, StoreConnectionError, StoreError, SubmissionError
from .gateway_client import GatewayStoreAdapter
from .protocols import DocumentStore
from .types import Credentials, QueryOptions

__all__ = [
    "Credentials",
    "DocumentStore",
    "GatewayStoreAdapter",
    "QueryError",
    "QueryOptions",
    "StoreConnectionError",
    "StoreError",
    "SubmissionError",
]
