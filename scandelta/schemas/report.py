"""Pydantic models for one scanner's output and for the aggregate report of a whole run."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from scandelta import __version__
from scandelta.schemas.messages import Message, coerce_message, coerce_messages, is_serialized_message

ReportMode = Literal["full report", "diff results"]

MODE_FULL_REPORT: ReportMode = "full report"
MODE_DIFF_RESULTS: ReportMode = "diff results"


def _as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes are taken as UTC so reports from any source compare safely."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _duration(start: datetime | None, end: datetime | None) -> float | None:
    if start is None or end is None:
        return None
    return round((end - start).total_seconds(), 2)


class PriorRunRef(BaseModel):
    """What a diff was computed against: start time and revision of the older run."""

    start_time: datetime = Field(..., description="Start time of the older run.")
    revision: str | None = Field(default=None, description="Revision the older run scanned.")

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: datetime) -> datetime:
        return _as_utc(v)


class ScannerOutput(BaseModel):
    """Result of one scanner run: run metadata plus the messages it produced."""

    scanner_name: str = Field(..., min_length=1, description="Name of the scanner, unique within a report.")
    version: str | None = Field(default=None, description="Scanner version.")
    start_time: datetime | None = Field(default=None, description="When the scanner started.")
    end_time: datetime | None = Field(default=None, description="When the scanner finished.")
    revision: str | None = Field(default=None, description="Source revision the scanner ran on.")
    arguments: str | None = Field(default=None, description="Arguments the scanner was invoked with.")
    exception: str | None = Field(
        default=None,
        description="Failure message; set only when the scanner failed.",
    )
    relative_path: str = Field(
        default="",
        description="Subdirectory the scanner was scoped to; empty for the whole tree.",
    )
    mode: ReportMode = Field(default=MODE_FULL_REPORT)
    messages: list[Message] | None = Field(
        default_factory=list,
        description="Messages in scanner order; None when the scan failed to produce any.",
    )
    new_messages: list[Message] | None = Field(
        default=None,
        description="Messages not present in the older run; set only after a diff.",
    )
    fixed_messages: list[Message] | None = Field(
        default=None,
        description="Messages of the older run absent now; set only after a diff.",
    )
    old_report: PriorRunRef | None = Field(
        default=None,
        description="The older run this output was diffed against.",
    )

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)

    @field_validator("messages", "new_messages", "fixed_messages", mode="before")
    @classmethod
    def validate_messages(cls, v: object) -> object:
        # Raw scanner payloads are wrapped; serialized variants are left to the union.
        if isinstance(v, (list, tuple)):
            return [p if is_serialized_message(p) else coerce_message(p) for p in v]
        return v

    @field_validator("exception", mode="before")
    @classmethod
    def validate_exception(cls, v: object) -> object:
        if isinstance(v, BaseException):
            return str(v) or type(v).__name__
        return v

    @classmethod
    def from_scanner(
        cls,
        scanner_name: str,
        messages: list[Any] | None,
        **metadata: Any,
    ) -> "ScannerOutput":
        """Build an output from raw scanner payloads (dicts, lists or strings)."""
        return cls(scanner_name=scanner_name, messages=coerce_messages(messages), **metadata)

    @property
    def is_diffed(self) -> bool:
        return self.new_messages is not None and self.fixed_messages is not None

    @property
    def failed(self) -> bool:
        return self.exception is not None

    @property
    def duration(self) -> float | None:
        """Run time in seconds, rounded to 2 decimals."""
        return _duration(self.start_time, self.end_time)

    def messages_to_render(self) -> list[Message]:
        """New messages when diffed, otherwise every message."""
        if self.is_diffed:
            return list(self.new_messages or [])
        return list(self.messages or [])

    def is_empty(self) -> bool:
        return not self.messages_to_render()


class AggregateReport(BaseModel):
    """Results of a whole run across all scanners."""

    tool_version: str = Field(default=__version__, description="scandelta version that produced the report.")
    start_time: datetime | None = Field(default=None, description="When the run started.")
    end_time: datetime | None = Field(default=None, description="When the run finished.")
    project_name: str | None = Field(default=None, description="Name of the scanned project.")
    repo_url: str | None = Field(default=None, description="Repository URL of the scanned project.")
    revision: str | None = Field(default=None, description="Revision the run scanned.")
    scanner_reports: list[ScannerOutput] = Field(default_factory=list)
    diffed: bool = Field(default=False, description="True when the report is the result of a diff.")
    diffed_with: PriorRunRef | None = Field(
        default=None,
        description="Start time and revision of the report this one was diffed against.",
    )
    # In-memory reference to the report this one was diffed against; not persisted.
    old_report: "AggregateReport | None" = Field(default=None, exclude=True, repr=False)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_times(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)

    @property
    def duration(self) -> float | None:
        return _duration(self.start_time, self.end_time)

    @property
    def mode(self) -> ReportMode:
        return MODE_DIFF_RESULTS if self.diffed else MODE_FULL_REPORT

    def find_scanner_output(self, scanner_name: str) -> ScannerOutput | None:
        """First scanner output with the given name, or None."""
        for output in self.scanner_reports:
            if output.scanner_name == scanner_name:
                return output
        return None

    def is_empty(self) -> bool:
        """True when no scanner has anything to report."""
        return all(output.is_empty() and not output.failed for output in self.scanner_reports)


AggregateReport.model_rebuild()


def validate_scanner_output(output: ScannerOutput | None, *, require_run_data: bool = True) -> list[str]:
    """
    Return every constraint the scanner output violates (empty list when valid).

    With require_run_data, the output must also carry messages and a start time,
    which is what a prior output needs to be diffed against.
    """
    if output is None:
        return ["scanner output is missing"]
    violations: list[str] = []
    if not output.scanner_name or not output.scanner_name.strip():
        violations.append("scanner_name must be non-empty")
    if require_run_data:
        if output.messages is None:
            violations.append("messages are missing")
        if output.start_time is None:
            violations.append("start_time is missing")
    if (output.new_messages is None) != (output.fixed_messages is None):
        violations.append("new_messages and fixed_messages must be set together")
    if output.is_diffed and output.mode != MODE_DIFF_RESULTS:
        violations.append(f"diffed output must have mode {MODE_DIFF_RESULTS!r}")
    if output.mode == MODE_DIFF_RESULTS and not output.is_diffed:
        violations.append(f"output in mode {MODE_DIFF_RESULTS!r} lacks new/fixed messages")
    return violations


def validate_report(report: AggregateReport | None) -> list[str]:
    """Return every constraint the aggregate report violates (empty list when valid)."""
    if report is None:
        return ["report is missing"]
    violations: list[str] = []
    if report.start_time is None:
        violations.append("start_time is missing")
    if report.diffed and report.diffed_with is None:
        violations.append("diffed report lacks diffed_with")
    for i, output in enumerate(report.scanner_reports):
        for violation in validate_scanner_output(output, require_run_data=False):
            violations.append(f"scanner_reports[{i}] ({output.scanner_name}): {violation}")
    return violations
