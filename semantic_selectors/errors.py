"""Error taxonomy for selector resolution."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:  # pragma: no cover
    from .ambiguity import AmbiguityReport


class ErrorCode(Enum):
    """Standard error codes for structured responses."""

    NOT_FOUND = "NOT_FOUND"
    AMBIGUOUS = "AMBIGUOUS"
    STORE_EMPTY = "STORE_EMPTY"
    INVALID_MAPPING = "INVALID_MAPPING"


class ResolutionError(Exception):
    """Base class carrying a machine readable code and details."""

    code: ErrorCode = ErrorCode.NOT_FOUND

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class SelectorNotFoundError(ResolutionError, LookupError):
    code = ErrorCode.NOT_FOUND


class StoreEmptyError(ResolutionError):
    """Raised when resolve runs before anything was loaded."""

    code = ErrorCode.STORE_EMPTY


class MappingError(ResolutionError, ValueError):
    code = ErrorCode.INVALID_MAPPING


class AmbiguousSelectorError(ResolutionError):
    """Two or more candidates are tied; the report lists refinements."""

    code = ErrorCode.AMBIGUOUS

    def __init__(self, report: "AmbiguityReport") -> None:
        identifiers = ", ".join(c.record.identifier for c in report.tied)
        super().__init__(
            f"Query '{report.query}' is ambiguous between: {identifiers}",
            details=report.to_dict(),
        )
        self.report = report
