"""
Unit tests for the Result types module.
"""

from ballot_client.shared.results import (
    ErrorSeverity,
    ProcessingError,
    RefetchSummary,
    Result,
)


class TestProcessingError:
    """Tests for ProcessingError dataclass."""

    def test_defaults(self):
        error = ProcessingError(
            source="proposal_decode",
            message="Dropped proposal #2",
            severity=ErrorSeverity.WARNING,
        )
        assert error.context == {}
        assert error.exception is None

    def test_exception_does_not_affect_equality(self):
        """Two errors describing the same failure compare equal."""
        first = ProcessingError(
            source="refetch",
            message="Read winner failed",
            severity=ErrorSeverity.WARNING,
            exception=ValueError("a"),
        )
        second = ProcessingError(
            source="refetch",
            message="Read winner failed",
            severity=ErrorSeverity.WARNING,
            exception=ValueError("b"),
        )
        assert first == second

    def test_to_dict(self):
        error = ProcessingError(
            source="proposal_decode",
            message="Name is not valid UTF-8",
            severity=ErrorSeverity.WARNING,
            context={"index": 3},
        )
        assert error.to_dict() == {
            "source": "proposal_decode",
            "message": "Name is not valid UTF-8",
            "severity": "warning",
            "context": {"index": 3},
        }


class TestResult:
    """Tests for Result[T] generic class."""

    def test_ok_result(self):
        result = Result.ok(("Alice", "Bob"))
        assert result.success is True
        assert result.data == ("Alice", "Bob")
        assert result.errors == []
        assert result.is_partial is False

    def test_partial_success(self):
        """Usable data with the dropped items recorded."""
        dropped = ProcessingError(
            source="proposal_decode",
            message="Dropped proposal #1",
            severity=ErrorSeverity.ERROR,
        )
        result = Result.partial_success(data=("Alice",), errors=[dropped])

        assert result.success is True
        assert result.is_partial is True
        assert result.data == ("Alice",)
        assert result.errors == [dropped]

    def test_partial_success_copies_errors(self):
        errors = []
        result = Result.partial_success(data=(), errors=errors)
        errors.append("late")
        assert result.errors == []


class TestRefetchSummary:
    """Tests for RefetchSummary dataclass."""

    def test_defaults(self):
        summary = RefetchSummary(reason="refresh")
        assert summary.reads_requested == 0
        assert summary.reads_applied == 0
        assert summary.reads_failed == 0
        assert summary.reads_discarded == 0
        assert summary.errors == []

    def test_to_dict(self):
        summary = RefetchSummary(
            reason="refresh",
            reads_requested=7,
            reads_applied=6,
            reads_failed=1,
        )
        summary.add_error(
            ProcessingError(
                source="refetch",
                message="Read winner failed",
                severity=ErrorSeverity.WARNING,
            )
        )

        d = summary.to_dict()
        assert d["reason"] == "refresh"
        assert d["counts"] == {
            "requested": 7,
            "applied": 6,
            "failed": 1,
            "discarded": 0,
        }
        assert d["errors"][0]["message"] == "Read winner failed"
