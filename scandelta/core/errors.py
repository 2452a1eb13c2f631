"""Error taxonomy for report diffing, persistence and rendering."""

from pathlib import Path


class ScanDeltaError(Exception):
    """Base class for errors raised by scandelta."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ReportValidationError(ScanDeltaError):
    """Raised when a report or scanner output violates one or more constraints.

    ``violations`` lists every violated constraint, not just the first one.
    """

    def __init__(self, entity: str, violations: list[str]) -> None:
        self.entity = entity
        self.violations = list(violations)
        super().__init__(f"{entity} is invalid: " + "; ".join(self.violations))


class MalformedPriorReport(ReportValidationError):
    """Prior report or scanner output is missing required structure; diffing is skipped."""


class CorruptReport(ScanDeltaError):
    """A persisted report record cannot be read or does not hold a valid report."""

    def __init__(self, path: Path | str, reason: str, cause: Exception | None = None) -> None:
        self.path = Path(path)
        self.reason = reason
        self.cause = cause
        super().__init__(f"Corrupt report {self.path}: {reason}")


class InvalidMessagePayload(ScanDeltaError):
    """A scanner message is neither a record, a list of lines nor a string."""

    def __init__(self, payload: object) -> None:
        self.payload = payload
        super().__init__(
            f"Message must be a record, list or string, got {type(payload).__name__}"
        )


class PersistenceFailure(ScanDeltaError):
    """A report could not be written to the report store."""

    def __init__(self, path: Path | str, reason: str, cause: Exception | None = None) -> None:
        self.path = Path(path)
        self.reason = reason
        self.cause = cause
        super().__init__(f"Cannot persist report to {self.path}: {reason}")
