"""Pydantic schemas for scanner messages and reports."""

from scandelta.schemas.messages import (
    InvalidMessage,
    ListMessage,
    Message,
    RecordMessage,
    TextMessage,
    coerce_message,
    coerce_messages,
    is_serialized_message,
)
from scandelta.schemas.report import (
    MODE_DIFF_RESULTS,
    MODE_FULL_REPORT,
    AggregateReport,
    PriorRunRef,
    ScannerOutput,
    validate_report,
    validate_scanner_output,
)

__all__ = [
    "MODE_DIFF_RESULTS",
    "MODE_FULL_REPORT",
    "AggregateReport",
    "InvalidMessage",
    "ListMessage",
    "Message",
    "PriorRunRef",
    "RecordMessage",
    "ScannerOutput",
    "TextMessage",
    "coerce_message",
    "coerce_messages",
    "is_serialized_message",
    "validate_report",
    "validate_scanner_output",
]
