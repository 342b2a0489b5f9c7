"""
Error taxonomy shared by the credential service and the client runtime.

  ConfigurationError     fatal; required static configuration is missing
  ValidationError        client-caused; answered with a 4xx, never retried
  UpstreamError          a collaborator answered with a non-success status
    NetworkError         a collaborator could not be reached at all
  ParseError             a document could not be parsed or parsed to nothing
  CachePersistenceError  the durable store rejected a write
    StorageQuotaError
    CacheSerializationError
"""

from __future__ import annotations


class IntervitaError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(IntervitaError):
    pass


class ValidationError(IntervitaError):
    pass


class UpstreamError(IntervitaError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NetworkError(UpstreamError):
    pass


class ParseError(IntervitaError):
    pass


class CachePersistenceError(IntervitaError):
    pass


class StorageQuotaError(CachePersistenceError):
    def __init__(self, size_bytes: int, quota_bytes: int) -> None:
        super().__init__(
            f"Serialized block is {size_bytes:,} bytes; quota is {quota_bytes:,} bytes."
        )
        self.size_bytes = size_bytes
        self.quota_bytes = quota_bytes


class CacheSerializationError(CachePersistenceError):
    pass
