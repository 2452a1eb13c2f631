"""Report retention: delete persisted report directories older than RETENTION_DAYS."""

import logging
import shutil
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from scandelta.core.errors import PersistenceFailure
from scandelta.services.store import list_report_dirs

if TYPE_CHECKING:
    from scandelta.core.config import Settings

logger = logging.getLogger(__name__)


def _run_time(report_dir: Path) -> datetime | None:
    """Parse the RFC-3339 directory name; None for directories not written by the store."""
    try:
        moment = datetime.fromisoformat(report_dir.name)
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def run_retention(
    root_dir: Path | str,
    settings: "Settings",
    now: datetime | None = None,
) -> int:
    """
    Delete report directories older than RETENTION_DAYS. The newest run is always kept.

    Returns the number of directories deleted. Idempotent: safe to run repeatedly.
    """
    if not settings.RETENTION_ENABLED:
        logger.info("Retention is disabled (RETENTION_ENABLED=false); skipping.")
        return 0

    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=settings.RETENTION_DAYS)
    dated = [(d, _run_time(d)) for d in list_report_dirs(root_dir)]
    dated = [(d, t) for d, t in dated if t is not None]
    if not dated:
        return 0
    newest = max(dated, key=lambda pair: pair[1])[0]

    deleted_count = 0
    for report_dir, run_time in dated:
        if report_dir == newest or run_time >= cutoff:
            continue
        try:
            shutil.rmtree(report_dir)
        except OSError as e:
            raise PersistenceFailure(report_dir, f"cannot delete ({e.strerror or e})", cause=e) from e
        deleted_count += 1

    if deleted_count > 0:
        logger.info(
            "Retention run: cutoff=%s, reports_deleted=%s",
            cutoff.isoformat(),
            deleted_count,
        )
    return deleted_count
