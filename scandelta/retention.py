"""
CLI entrypoint for the report retention job. Run from cron, e.g.:

  python -m scandelta.retention

Or daily: 0 3 * * * cd /path/to/project && .venv/bin/python -m scandelta.retention
"""

import logging
import sys

from dotenv import load_dotenv

from scandelta.core.config import get_settings
from scandelta.core.log import configure_logging
from scandelta.services.retention import run_retention

logger = logging.getLogger(__name__)


def main() -> int:
    """Run retention: delete reports older than RETENTION_DAYS."""
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)
    try:
        reports_deleted = run_retention(settings.GENERAL.workdir, settings)
        logger.info("Retention completed: reports_deleted=%s", reports_deleted)
        return 0
    except Exception as e:
        logger.exception("Retention job failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
