"""
Result types for explicit success/failure tracking.

Decoding a batch of proposal slots and refetching the ballot state both
touch several independent items. These types let a batch finish with the
items that worked while keeping a record of the ones that didn't.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Severity levels for processing errors."""

    WARNING = "warning"  # Previous value kept, nothing lost
    ERROR = "error"  # Item dropped, the rest of the batch continues


@dataclass
class ProcessingError:
    """
    Represents a single processing error with context.

    Attributes:
        source: Component that generated the error ("proposal_decode", "refetch")
        message: Human-readable error description
        severity: Whether the item was dropped or merely left stale
        context: Additional context like slot index or read name
        exception: Original exception if available
    """

    source: str
    message: str
    severity: ErrorSeverity
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[Exception] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "source": self.source,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
        }


@dataclass
class Result(Generic[T]):
    """
    Outcome of a batch that may keep going past bad items.

    Attributes:
        success: Whether usable data came out
        data: The result data if successful
        errors: Items that were dropped along the way
        is_partial: True when the data is usable but some items were dropped
    """

    success: bool
    data: Optional[T] = None
    errors: List[ProcessingError] = field(default_factory=list)
    is_partial: bool = False

    @classmethod
    def ok(cls, data: T) -> "Result[T]":
        """Create a successful result with data."""
        return cls(success=True, data=data)

    @classmethod
    def partial_success(
        cls, data: T, errors: List[ProcessingError]
    ) -> "Result[T]":
        """Create a successful result that lost some items along the way."""
        return cls(
            success=True, data=data, errors=list(errors), is_partial=True
        )


@dataclass
class RefetchSummary:
    """
    Summary of one refetch pass over the ballot reads.

    Applied reads made it into the raw read set, failed reads left the
    previous value in place, discarded reads resolved after the session
    identity changed and were thrown away.
    """

    reason: str
    reads_requested: int = 0
    reads_applied: int = 0
    reads_failed: int = 0
    reads_discarded: int = 0
    errors: List[ProcessingError] = field(default_factory=list)

    def add_error(self, error: ProcessingError) -> None:
        self.errors.append(error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert summary to dictionary for JSON serialization."""
        return {
            "reason": self.reason,
            "counts": {
                "requested": self.reads_requested,
                "applied": self.reads_applied,
                "failed": self.reads_failed,
                "discarded": self.reads_discarded,
            },
            "errors": [e.to_dict() for e in self.errors],
        }
