"""Unit tests for scandelta.services.severity: rank table, compare, and field equality."""

import unittest

from scandelta.schemas.messages import ListMessage, RecordMessage, TextMessage
from scandelta.services.severity import (
    compare,
    fields_equal_except,
    normalize_ignore_fields,
    severity_rank,
    sort_by_severity,
)


def _record(**fields: object) -> RecordMessage:
    return RecordMessage(data=fields)


class TestCompare(unittest.TestCase):
    """compare() orders by severity rank: critical first, unknown last."""

    def setUp(self) -> None:
        self.ordered = [
            _record(name="CVE-0123-4567", severity=s)
            for s in ("critical", "high", "medium", "low", "info", "unknown")
        ]

    def test_more_severe_compares_less(self) -> None:
        for more, less in zip(self.ordered, self.ordered[1:]):
            self.assertEqual(compare(more, less), -1)

    def test_less_severe_compares_greater(self) -> None:
        for more, less in zip(self.ordered, self.ordered[1:]):
            self.assertEqual(compare(less, more), 1)

    def test_same_severity_compares_equal(self) -> None:
        for record in self.ordered:
            self.assertEqual(compare(record, record.model_copy()), 0)

    def test_critical_vs_info(self) -> None:
        self.assertEqual(compare({"severity": "critical"}, {"severity": "info"}), -1)

    def test_unknown_vs_unknown(self) -> None:
        self.assertEqual(compare({"severity": "unknown"}, {"severity": "unknown"}), 0)

    def test_missing_and_unrecognized_rank_as_unknown(self) -> None:
        self.assertEqual(compare(_record(name="x"), _record(severity="unknown")), 0)
        self.assertEqual(compare(_record(severity="bogus"), _record(severity="info")), 1)
        self.assertEqual(severity_rank(None), severity_rank("unknown"))

    def test_rank_is_case_insensitive(self) -> None:
        self.assertEqual(severity_rank(" HIGH "), severity_rank("high"))

    def test_sort_by_severity_is_stable(self) -> None:
        a = _record(name="a", severity="low")
        b = _record(name="b", severity="critical")
        c = _record(name="c", severity="low")
        self.assertEqual(sort_by_severity([a, b, c]), [b, a, c])


class TestFieldsEqualExcept(unittest.TestCase):
    """fields_equal_except() matches findings across scans."""

    def test_identical_records_are_equal(self) -> None:
        a = _record(name="CVE-A", severity="high")
        self.assertTrue(fields_equal_except(a, _record(name="CVE-A", severity="high"), []))

    def test_differing_field_is_unequal(self) -> None:
        a = _record(name="CVE-A", severity="high")
        self.assertFalse(fields_equal_except(a, _record(name="CVE-A", severity="low"), []))

    def test_ignored_field_is_skipped(self) -> None:
        a = _record(name="CVE-A", scanned_at="2014-05-30T15:37:04")
        b = _record(name="CVE-A", scanned_at="2014-06-01T09:00:00")
        self.assertFalse(fields_equal_except(a, b, []))
        self.assertTrue(fields_equal_except(a, b, ["scanned_at"]))
        self.assertTrue(fields_equal_except(a, b, "scanned_at"))

    def test_missing_key_is_unequal_even_for_none(self) -> None:
        a = _record(name="CVE-A", remediation=None)
        self.assertFalse(fields_equal_except(a, _record(name="CVE-A"), []))

    def test_comparison_is_driven_by_first_record(self) -> None:
        # Asymmetric on purpose: extra fields on the second record are not looked at.
        narrow = _record(name="CVE-A")
        wide = _record(name="CVE-A", file="app.rb")
        self.assertTrue(fields_equal_except(narrow, wide, []))
        self.assertFalse(fields_equal_except(wide, narrow, []))

    def test_non_records_never_equal(self) -> None:
        text = TextMessage(text="warning")
        lines = ListMessage(lines=["a", "b"])
        self.assertFalse(fields_equal_except(text, TextMessage(text="warning"), []))
        self.assertFalse(fields_equal_except(lines, ListMessage(lines=["a", "b"]), []))
        self.assertFalse(fields_equal_except(_record(name="x"), text, []))


class TestNormalizeIgnoreFields(unittest.TestCase):
    def test_shapes(self) -> None:
        self.assertEqual(normalize_ignore_fields(None), frozenset())
        self.assertEqual(normalize_ignore_fields("date"), frozenset({"date"}))
        self.assertEqual(normalize_ignore_fields(["date", "id"]), frozenset({"date", "id"}))


if __name__ == "__main__":
    unittest.main()
