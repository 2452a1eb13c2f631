"""Severity ordering of warning records and field-wise equality used to match findings across scans."""

from collections.abc import Iterable, Mapping
from functools import cmp_to_key
from typing import Any

from scandelta.schemas.messages import RecordMessage

# Rank table, most severe first. Anything not listed ranks as "unknown".
SEVERITY_ORDER: tuple[str, ...] = ("critical", "high", "medium", "low", "info", "unknown")

_SEVERITY_RANK: dict[str, int] = {s: i for i, s in enumerate(SEVERITY_ORDER)}
_UNKNOWN_RANK = _SEVERITY_RANK["unknown"]

_MISSING = object()


def severity_rank(severity: object) -> int:
    """Map a severity value to its rank (0 = critical). Missing or unrecognized -> unknown."""
    if not isinstance(severity, str) or not severity.strip():
        return _UNKNOWN_RANK
    return _SEVERITY_RANK.get(severity.strip().lower(), _UNKNOWN_RANK)


def _severity_of(message: RecordMessage | Mapping[str, Any] | object) -> object:
    if isinstance(message, RecordMessage):
        return message.get("severity")
    if isinstance(message, Mapping):
        return message.get("severity")
    return None


def compare(a: RecordMessage | Mapping[str, Any], b: RecordMessage | Mapping[str, Any]) -> int:
    """
    Compare two records by severity: -1 if a is strictly more severe than b,
    0 if they rank equally, 1 otherwise.
    """
    rank_a = severity_rank(_severity_of(a))
    rank_b = severity_rank(_severity_of(b))
    if rank_a < rank_b:
        return -1
    if rank_a == rank_b:
        return 0
    return 1


def sort_by_severity(messages: Iterable[RecordMessage]) -> list[RecordMessage]:
    """Stable sort, most severe first."""
    return sorted(messages, key=cmp_to_key(compare))


def normalize_ignore_fields(ignore_fields: str | Iterable[str] | None) -> frozenset[str]:
    """Accept a single field name, an iterable of names, or None."""
    if ignore_fields is None:
        return frozenset()
    if isinstance(ignore_fields, str):
        return frozenset({ignore_fields})
    return frozenset(ignore_fields)


def fields_equal_except(a: object, b: object, ignored: str | Iterable[str] | None = None) -> bool:
    """
    True iff every field of ``a`` that is not ignored has an equal value in ``b``.

    The comparison is driven by a's field set only: extra fields on b are not
    looked at, while a field of a that b lacks makes them unequal. Messages that
    are not records are never equal to anything.
    """
    if not isinstance(a, RecordMessage) or not isinstance(b, RecordMessage):
        return False
    skip = normalize_ignore_fields(ignored)
    for field, value in a.data.items():
        if field in skip:
            continue
        if b.data.get(field, _MISSING) != value:
            return False
    return True
