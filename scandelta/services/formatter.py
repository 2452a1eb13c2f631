"""Render aggregate reports and scanner outputs as deterministic plaintext for mail or CI logs."""

import logging
from collections.abc import Mapping

from scandelta.schemas.messages import RecordMessage, coerce_message
from scandelta.schemas.report import AggregateReport, ScannerOutput
from scandelta.services.severity import sort_by_severity

logger = logging.getLogger(__name__)

RULE_WIDTH = 55
BANNER_RULE = "#" * RULE_WIDTH
SECTION_RULE = "=" * RULE_WIDTH
MESSAGE_RULE = "-" * RULE_WIDTH
BANNER_TITLE = "SCANDELTA REPORT"

# Label column widths (label plus colon, padded).
_REPORT_LABEL_WIDTH = 11
_SCANNER_LABEL_WIDTH = 15


def _line(label: str, value: object, width: int) -> str:
    text = "" if value is None else str(value)
    return f"{label + ':':<{width}} {text}".rstrip() + "\n"


def _duration_text(duration: float | None) -> str:
    return "unknown" if duration is None else f"{duration} s"


def format_message(message: object) -> str:
    """
    Render one message body: records as aligned lines, lists joined by newlines, text verbatim.

    Raw payloads (mapping, list, string) are wrapped first; any other shape logs an error and renders empty.
    """
    return coerce_message(message).render()


def sort_messages(field: str, messages: list) -> list:
    """
    Sort messages ascending by field; "severity" sorts most severe first.

    Order is kept as is unless every message is a record carrying the field.
    """
    if not all(isinstance(m, RecordMessage) and m.get(field) is not None for m in messages):
        return messages
    if field == "severity":
        return sort_by_severity(messages)
    try:
        return sorted(messages, key=lambda m: m[field])
    except TypeError:
        logger.warning(
            "Messages not sorted: values of %r are not comparable",
            field,
        )
        return messages


def _render_scanner_header(output: ScannerOutput) -> str:
    w = _SCANNER_LABEL_WIDTH
    header = SECTION_RULE + "\n"
    if output.relative_path:
        header += _line("directory", output.relative_path, w)
    header += _line("scanner", output.scanner_name, w)
    header += _line("version", output.version, w)
    header += _line("duration", _duration_text(output.duration), w)
    header += _line("arguments", output.arguments, w)
    header += _line("mode", output.mode, w)
    header += "\n"
    if output.is_diffed and output.old_report is not None:
        header += "[diffed with]\n"
        header += _line("start time", output.old_report.start_time.isoformat(), w)
        if output.old_report.revision:
            header += _line("revision", output.old_report.revision, w)
        header += "\n"
    if output.failed:
        header += f"ERROR: {output.exception}\n"
    else:
        header += _line("total messages", len(output.messages or []), w)
        if output.is_diffed:
            header += _line("new messages", len(output.new_messages or []), w)
            header += _line("fixed messages", len(output.fixed_messages or []), w)
    header += SECTION_RULE + "\n\n"
    return header


def _render_messages(output: ScannerOutput, sort_field: str | None) -> str:
    messages = output.messages_to_render()
    if not messages:
        return "No messages.\n"
    if sort_field:
        messages = sort_messages(sort_field, messages)
    return ("\n" + MESSAGE_RULE + "\n\n").join(format_message(m) for m in messages)


def render_scanner_output(output: ScannerOutput, sort_field: str | None = None) -> str:
    """Header block for one scanner followed by its messages (new messages when diffed)."""
    text = _render_scanner_header(output)
    if not output.failed:
        text += _render_messages(output, sort_field)
    return text


def _render_report_header(report: AggregateReport) -> str:
    w = _REPORT_LABEL_WIDTH
    header = BANNER_RULE + "\n"
    header += " " * ((RULE_WIDTH - len(BANNER_TITLE)) // 2) + BANNER_TITLE + "\n"
    header += BANNER_RULE + "\n"
    header += _line("version", report.tool_version, w)
    header += _line("start time", report.start_time.isoformat() if report.start_time else None, w)
    header += _line("end time", report.end_time.isoformat() if report.end_time else None, w)
    header += _line("duration", _duration_text(report.duration), w)
    header += _line("mode", report.mode, w)
    header += "\n"
    header += _line("name", report.project_name, w)
    header += _line("repo", report.repo_url, w)
    header += _line("revision", report.revision, w)
    header += "\n"
    if report.diffed and report.diffed_with is not None:
        header += "[diffed with]\n"
        header += _line("start time", report.diffed_with.start_time.isoformat(), w)
        header += _line("revision", report.diffed_with.revision, w)
        header += "\n"
    header += BANNER_RULE + "\n\n"
    return header


def render_report(report: AggregateReport, sort_fields: Mapping[str, str] | None = None) -> str:
    """
    Render the whole report: banner, run and project info, diff info when diffed,
    then one block per scanner output in report order.

    sort_fields maps scanner name to the message field its messages are sorted by.
    """
    fields = sort_fields or {}
    text = _render_report_header(report)
    for output in report.scanner_reports:
        text += render_scanner_output(output, fields.get(output.scanner_name)) + "\n"
    return text
