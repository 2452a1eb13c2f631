"""Unit tests for scandelta.schemas.messages: payload coercion and per-variant rendering."""

import unittest

from scandelta.schemas.messages import (
    InvalidMessage,
    ListMessage,
    RecordMessage,
    TextMessage,
    coerce_message,
    coerce_messages,
    is_serialized_message,
)


class TestCoerceMessage(unittest.TestCase):
    def test_dict_becomes_record_preserving_order(self) -> None:
        msg = coerce_message({"name": "CVE-A", "severity": "high", "line": 12})
        self.assertIsInstance(msg, RecordMessage)
        self.assertEqual(msg.keys(), ["name", "severity", "line"])
        self.assertEqual(msg.severity, "high")
        self.assertEqual(msg["line"], 12)
        self.assertIn("name", msg)

    def test_list_and_string(self) -> None:
        self.assertEqual(coerce_message(["a", "b"]), ListMessage(lines=["a", "b"]))
        self.assertEqual(coerce_message("plain"), TextMessage(text="plain"))

    def test_existing_variant_passes_through(self) -> None:
        msg = TextMessage(text="x")
        self.assertIs(coerce_message(msg), msg)

    def test_unsupported_payload_is_kept_as_invalid(self) -> None:
        with self.assertLogs("scandelta.schemas.messages", level="ERROR"):
            msg = coerce_message(42)
        self.assertIsInstance(msg, InvalidMessage)
        self.assertEqual(msg.payload_type, "int")

    def test_record_with_unrepresentable_value_is_kept_as_invalid(self) -> None:
        with self.assertLogs("scandelta.schemas.messages", level="ERROR"):
            msg = coerce_message({"location": {"file": "a.py"}})
        self.assertIsInstance(msg, InvalidMessage)
        self.assertEqual(msg.payload_type, "dict")

    def test_serialized_message_detection(self) -> None:
        self.assertTrue(is_serialized_message(RecordMessage(data={"name": "A"}).model_dump()))
        self.assertTrue(is_serialized_message({"kind": "text", "text": "x"}))
        self.assertFalse(is_serialized_message({"kind": "record", "name": "A"}))
        self.assertFalse(is_serialized_message({"name": "A"}))
        self.assertFalse(is_serialized_message("x"))

    def test_none_means_scan_failed(self) -> None:
        self.assertIsNone(coerce_messages(None))
        self.assertEqual(len(coerce_messages([{"a": "1"}, "b"])), 2)


class TestRender(unittest.TestCase):
    def test_record_aligns_keys_and_skips_empty_values(self) -> None:
        msg = RecordMessage(
            data={
                "name": "CVE-2012-6496",
                "severity": "high",
                "remediation": None,
                "message": "",
            }
        )
        self.assertEqual(
            msg.render(),
            "name:        CVE-2012-6496\n"
            "severity:    high\n",
        )

    def test_record_multiline_value(self) -> None:
        msg = RecordMessage(data={"file": "a.py", "code": ["x = 1", "y = 2"]})
        self.assertEqual(
            msg.render(),
            "file: a.py\n"
            "code: x = 1\n"
            "      y = 2\n",
        )

    def test_list_and_text(self) -> None:
        self.assertEqual(ListMessage(lines=["one", "two"]).render(), "one\ntwo")
        self.assertEqual(TextMessage(text="verbatim\n").render(), "verbatim\n")

    def test_invalid_renders_empty_with_error_log(self) -> None:
        with self.assertLogs("scandelta.schemas.messages", level="ERROR"):
            self.assertEqual(InvalidMessage(payload_type="int", payload="42").render(), "")


if __name__ == "__main__":
    unittest.main()
