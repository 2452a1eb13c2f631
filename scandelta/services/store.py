"""
Report store: persist aggregate reports under <workdir>/reports/<RFC-3339 timestamp>/report.json
and find the most recent one.

The directory for a run is fixed once, when the RunContext is created, so every
save within one run targets the same directory regardless of the wall clock.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from scandelta.core.errors import CorruptReport, PersistenceFailure
from scandelta.schemas.report import AggregateReport, validate_report

if TYPE_CHECKING:
    from scandelta.core.config import Settings

logger = logging.getLogger(__name__)

REPORTS_DIR_NAME = "reports"
REPORT_FILE_NAME = "report.json"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def rfc3339(moment: datetime) -> str:
    """RFC-3339 timestamp with second precision, e.g. 2014-05-30T15:38:04+00:00."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat(timespec="seconds")


def reports_root(workdir: Path | str) -> Path:
    return Path(workdir) / REPORTS_DIR_NAME


@dataclass(frozen=True)
class RunContext:
    """One scan invocation. Created once; report_dir never changes afterwards."""

    workdir: Path
    started_at: datetime
    report_dir: Path = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "workdir", Path(self.workdir))
        object.__setattr__(
            self,
            "report_dir",
            reports_root(self.workdir) / rfc3339(self.started_at),
        )

    @classmethod
    def create(cls, settings: "Settings") -> "RunContext":
        """Start a run now, storing reports under the configured workdir."""
        return cls(workdir=settings.GENERAL.workdir, started_at=_now())

    @property
    def report_path(self) -> Path:
        return self.report_dir / REPORT_FILE_NAME


def load(path: Path | str) -> AggregateReport:
    """
    Load a report written by save().

    Raises CorruptReport when the file cannot be read or decoded, is not JSON, does not
    match the report schema, or lacks required metadata.
    """
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CorruptReport(path, f"cannot read file ({e.strerror or e})", cause=e) from e
    except UnicodeDecodeError as e:
        raise CorruptReport(path, "file is not valid UTF-8", cause=e) from e
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptReport(path, "file is not valid JSON", cause=e) from e
    if not isinstance(data, dict):
        raise CorruptReport(path, "top-level value is not an object")
    try:
        report = AggregateReport.model_validate(data)
    except ValidationError as e:
        raise CorruptReport(
            path,
            f"does not match report schema ({e.error_count()} errors)",
            cause=e,
        ) from e
    violations = validate_report(report)
    if violations:
        raise CorruptReport(path, "; ".join(violations))
    return report


def list_report_files(root_dir: Path | str) -> list[Path]:
    """Every persisted report file under <root_dir>/reports, at any depth, sorted by path."""
    base = reports_root(root_dir)
    if not base.is_dir():
        return []
    return sorted(p for p in base.rglob(REPORT_FILE_NAME) if p.is_file())


def list_report_dirs(root_dir: Path | str) -> list[Path]:
    """Run directories (direct children of <root_dir>/reports), sorted by name."""
    base = reports_root(root_dir)
    if not base.is_dir():
        return []
    return sorted(p for p in base.iterdir() if p.is_dir())


def find_latest(root_dir: Path | str) -> AggregateReport | None:
    """
    Return the persisted report with the latest start_time, or None if there is none.

    Corrupt candidates are logged and skipped; they never abort the search.
    """
    latest: AggregateReport | None = None
    skipped = 0
    for report_file in list_report_files(root_dir):
        try:
            report = load(report_file)
        except CorruptReport as e:
            skipped += 1
            logger.warning(
                "Skipping corrupt report: %s",
                e.reason,
                extra={"path": str(e.path)},
            )
            continue
        if latest is None or report.start_time > latest.start_time:
            latest = report
    logger.info(
        "Latest report lookup completed",
        extra={
            "root_dir": str(root_dir),
            "found": latest is not None,
            "skipped": skipped,
        },
    )
    return latest


def save(report: AggregateReport, context: RunContext) -> Path:
    """
    Write report to the run's directory and return the file path.

    Raises PersistenceFailure when the directory or file cannot be written.
    """
    target = context.report_path
    try:
        context.report_dir.mkdir(parents=True, exist_ok=True)
        target.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    except OSError as e:
        logger.error(
            "Saving report failed",
            extra={"path": str(target), "reason": e.strerror or str(e)},
        )
        raise PersistenceFailure(target, e.strerror or str(e), cause=e) from e
    logger.info(
        "Report saved",
        extra={"path": str(target), "scanner_count": len(report.scanner_reports)},
    )
    return target
