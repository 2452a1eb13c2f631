"""Scanner message variants: structured warning records, line lists, plain text.

Every scanner emits a sequence of messages. Most scanners produce structured
warning records (field name -> value); some only produce a list of lines or a
plain string. Each variant knows how to render itself as plaintext.
"""

import logging
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from scandelta.core.errors import InvalidMessagePayload

logger = logging.getLogger(__name__)

# A record field is a scalar, or a list of strings for multi-line values.
FieldValue = Union[str, int, float, bool, list[str], None]


class TextMessage(BaseModel):
    """A message that is a bare string."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str

    def render(self) -> str:
        return self.text


class ListMessage(BaseModel):
    """A message that is a list of lines."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["list"] = "list"
    lines: list[str] = Field(default_factory=list)

    def render(self) -> str:
        return "\n".join(self.lines)


class RecordMessage(BaseModel):
    """
    A structured warning record: an ordered mapping of field name to value.

    Field sets differ between scanners (cve_id/severity/remediation for one,
    file/line/rule for another). Only ``severity`` has a typed accessor; every
    other field is looked up by name.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["record"] = "record"
    data: dict[str, FieldValue] = Field(default_factory=dict)

    @property
    def severity(self) -> str | None:
        value = self.data.get("severity")
        return value if isinstance(value, str) else None

    def get(self, field: str, default: Any = None) -> Any:
        return self.data.get(field, default)

    def keys(self) -> list[str]:
        return list(self.data.keys())

    def __getitem__(self, field: str) -> FieldValue:
        return self.data[field]

    def __contains__(self, field: object) -> bool:
        return field in self.data

    def render(self) -> str:
        """Aligned ``key: value`` lines; fields without a value are skipped."""
        key_width = max((len(key) for key in self.data), default=0) + 1
        out: list[str] = []
        for key, value in self.data.items():
            if value is None or value == "" or value == []:
                continue
            label = f"{key}:".ljust(key_width)
            if isinstance(value, list):
                out.append(f"{label} {value[0]}")
                out.extend(" " * (key_width + 1) + str(line) for line in value[1:])
            else:
                out.append(f"{label} {value}")
        return "".join(line + "\n" for line in out)


class InvalidMessage(BaseModel):
    """Placeholder for a payload of unsupported shape; renders as empty text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["invalid"] = "invalid"
    payload_type: str
    payload: str = ""

    def render(self) -> str:
        logger.error(
            "Cannot render message payload",
            extra={"payload_type": self.payload_type},
        )
        return ""


Message = Annotated[
    Union[RecordMessage, ListMessage, TextMessage, InvalidMessage],
    Field(discriminator="kind"),
]

_MESSAGE_TYPES = (RecordMessage, ListMessage, TextMessage, InvalidMessage)

# kind tag -> field names of the variant, for recognising serialized messages.
_TAGGED_FIELDS = {
    cls.model_fields["kind"].default: frozenset(cls.model_fields) for cls in _MESSAGE_TYPES
}


def is_record(message: object) -> bool:
    """True if message is a structured warning record."""
    return isinstance(message, RecordMessage)


def is_serialized_message(payload: object) -> bool:
    """True if payload is a dumped message variant (``kind`` tag plus that variant's fields)."""
    if not isinstance(payload, dict):
        return False
    fields = _TAGGED_FIELDS.get(payload.get("kind"))
    return fields is not None and set(payload) <= fields


def coerce_message(payload: object) -> Message:
    """
    Wrap a raw scanner payload into a message variant.

    dict -> RecordMessage, list -> ListMessage, str -> TextMessage. Any other
    shape (or a record whose values cannot be represented) is logged and kept
    as an InvalidMessage so the rest of the scan is unaffected.
    """
    if isinstance(payload, _MESSAGE_TYPES):
        return payload
    try:
        if isinstance(payload, dict):
            return RecordMessage(data={str(k): v for k, v in payload.items()})
        if isinstance(payload, (list, tuple)):
            return ListMessage(lines=[str(line) for line in payload])
        if isinstance(payload, str):
            return TextMessage(text=payload)
    except ValidationError as e:
        logger.error(
            "Scanner message rejected: %s",
            e.errors()[0]["msg"] if e.errors() else str(e),
            extra={"payload_type": type(payload).__name__},
        )
        return InvalidMessage(payload_type=type(payload).__name__, payload=repr(payload))
    err = InvalidMessagePayload(payload)
    logger.error(err.message, extra={"payload_type": type(payload).__name__})
    return InvalidMessage(payload_type=type(payload).__name__, payload=repr(payload))


def coerce_messages(payloads: list[object] | None) -> list[Message] | None:
    """Coerce a scanner's raw message list; None (scan failed) stays None."""
    if payloads is None:
        return None
    return [coerce_message(p) for p in payloads]
