"""Domain layer exceptions.

All domain-specific exceptions inherit from DomainError.
"""
from __future__ import annotations

from typing import Any
from uuid import UUID


class DomainError(Exception):
    """Base exception for domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message


class EntityNotFoundError(DomainError):
    def __init__(self, entity_type: str, entity_id: UUID | str, details: dict[str, Any] | None = None) -> None:
        message = f"{entity_type} not found: {entity_id}"
        super().__init__(message, details)
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationError(DomainError):
    def __init__(self, field: str, message: str, value: Any = None) -> None:
        full_message = f"Validation error for '{field}': {message}"
        details = {"field": field, "value": value}
        super().__init__(full_message, details)
        self.field = field
        self.value = value


class FormatError(DomainError):
    """Input could not be decoded by a format adapter. Fatal to the parse."""

    def __init__(self, source_format: str, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            f"Failed to parse {source_format} input: {reason}",
            {"source_format": source_format, **(details or {})},
        )
        self.source_format = source_format
        self.reason = reason


class UnsupportedFormatError(FormatError):
    def __init__(self, source_format: str, supported: list[str]) -> None:
        super().__init__(source_format, "unsupported format", {"supported_formats": supported})
        self.supported = supported


class FileTooLargeError(FormatError):
    def __init__(self, source_format: str, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(
            source_format,
            "file exceeds upload limit",
            {"size_bytes": size_bytes, "limit_bytes": limit_bytes},
        )
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class RepositoryError(DomainError):
    pass


class ObjectStorageError(DomainError):
    def __init__(self, object_ref: str, reason: str) -> None:
        super().__init__(f"Object storage failure for {object_ref}", {"reason": reason})
        self.object_ref = object_ref
        self.reason = reason
