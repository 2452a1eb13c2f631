"""
Diff a scan against the most recent prior scan, per scanner and for a whole report.

The diff is one-directional: it answers "what changed going from old to new".
New messages are those of the new run with no matching record in the old run;
fixed messages are those of the old run with no matching record in the new run.
Two records match when all of their non-ignored fields are equal. Text and
list messages carry no fields; they match an identical message of the other run.

A prior output or report that lacks required structure is never fatal: the
failure is logged and the new output is returned as a full report.
"""

import logging
from collections.abc import Iterable, Mapping

from scandelta.core.errors import MalformedPriorReport
from scandelta.schemas.messages import Message, RecordMessage
from scandelta.schemas.report import (
    MODE_DIFF_RESULTS,
    AggregateReport,
    PriorRunRef,
    ScannerOutput,
    validate_report,
    validate_scanner_output,
)
from scandelta.services.severity import fields_equal_except, normalize_ignore_fields

logger = logging.getLogger(__name__)


def _matches(message: Message, other: Message, ignored: frozenset[str]) -> bool:
    if isinstance(message, RecordMessage):
        return fields_equal_except(message, other, ignored)
    return message == other


def _unmatched(
    messages: list[Message],
    others: list[Message],
    ignored: frozenset[str],
) -> list[Message]:
    """Messages of ``messages`` with no match in ``others`` (pairwise, O(n*m))."""
    return [
        msg
        for msg in messages
        if not any(_matches(msg, other, ignored) for other in others)
    ]


def diff_scanner_output(
    old_output: ScannerOutput | None,
    new_output: ScannerOutput,
    ignore_fields: str | Iterable[str] | None = None,
) -> ScannerOutput:
    """
    Return a copy of new_output holding new_messages, fixed_messages and a reference to the old run.

    If old_output is missing or malformed (no messages or no start time), or the
    new scan produced no messages at all, the diff is skipped and new_output is
    returned unmodified in full-report mode. Messages that are not records are
    matched by value, on both sides.
    """
    violations = validate_scanner_output(old_output)
    if new_output.messages is None:
        violations.append(f"new output of {new_output.scanner_name} has no messages")
    if violations:
        err = MalformedPriorReport(f"prior output of {new_output.scanner_name}", violations)
        logger.error(
            "Diffing with old report failed, falling back to full report: %s",
            err.message,
            extra={"scanner_name": new_output.scanner_name},
        )
        return new_output

    ignored = normalize_ignore_fields(ignore_fields)
    new_messages_all = list(new_output.messages or [])
    old_messages_all = list(old_output.messages or [])

    new_messages = _unmatched(new_messages_all, old_messages_all, ignored)
    fixed_messages = _unmatched(old_messages_all, new_messages_all, ignored)

    logger.debug(
        "Diffed scanner output",
        extra={
            "scanner_name": new_output.scanner_name,
            "new_count": len(new_messages),
            "fixed_count": len(fixed_messages),
        },
    )
    return new_output.model_copy(
        update={
            "new_messages": new_messages,
            "fixed_messages": fixed_messages,
            "old_report": PriorRunRef(
                start_time=old_output.start_time,
                revision=old_output.revision,
            ),
            "mode": MODE_DIFF_RESULTS,
        }
    )


def _empty_prior_output(scanner_name: str, old_report: AggregateReport) -> ScannerOutput:
    """Stand-in for a scanner that did not exist in the old report: no messages, so everything is new."""
    return ScannerOutput(
        scanner_name=scanner_name,
        start_time=old_report.start_time,
        revision=old_report.revision,
        messages=[],
    )


def diff_reports(
    old_report: AggregateReport | None,
    new_report: AggregateReport,
    ignore_fields: Mapping[str, str | Iterable[str]] | None = None,
) -> AggregateReport:
    """
    Diff every scanner output of new_report against the same-named output of old_report.

    The result carries new_report's run metadata, its scanner outputs in
    new_report's order, diffed=True and a reference to old_report.
    ignore_fields maps scanner name to the fields excluded from matching.
    """
    violations = validate_report(old_report)
    if violations:
        err = MalformedPriorReport("prior report", violations)
        logger.error(
            "Diffing with old report failed, falling back to full report: %s",
            err.message,
        )
        return new_report

    per_scanner = ignore_fields or {}
    diffed_outputs: list[ScannerOutput] = []
    for new_output in new_report.scanner_reports:
        name = new_output.scanner_name
        old_output = old_report.find_scanner_output(name)
        if old_output is None:
            logger.info(
                "No prior output for scanner; reporting all messages as new",
                extra={"scanner_name": name},
            )
            old_output = _empty_prior_output(name, old_report)
        diffed_outputs.append(
            diff_scanner_output(old_output, new_output, per_scanner.get(name))
        )

    return new_report.model_copy(
        update={
            "scanner_reports": diffed_outputs,
            "diffed": True,
            "diffed_with": PriorRunRef(
                start_time=old_report.start_time,
                revision=old_report.revision,
            ),
            "old_report": old_report,
        }
    )
