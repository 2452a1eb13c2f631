"""Core configuration, logging and error taxonomy."""

from scandelta.core.config import Settings, get_settings
from scandelta.core.errors import (
    CorruptReport,
    InvalidMessagePayload,
    MalformedPriorReport,
    PersistenceFailure,
    ReportValidationError,
    ScanDeltaError,
)

__all__ = [
    "CorruptReport",
    "InvalidMessagePayload",
    "MalformedPriorReport",
    "PersistenceFailure",
    "ReportValidationError",
    "ScanDeltaError",
    "Settings",
    "get_settings",
]
