"""Decode single transcript lines into typed records."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator

from .content import AbsentContent, MessageContent, decode_message_content
from .errors import LineDecodeError, TimestampParseError
from .models import TokenUsage


class TranscriptMessage(BaseModel):
    """The nested ``message`` object of a transcript line."""

    model_config = ConfigDict(frozen=True)

    role: str | None = None
    content: MessageContent = Field(default_factory=AbsentContent)
    model: str | None = None
    usage: TokenUsage | None = None
    stop_reason: str | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _decode_content(cls, value: Any) -> MessageContent:
        return decode_message_content(value)

    @field_validator("usage", mode="before")
    @classmethod
    def _decode_usage(cls, value: Any) -> TokenUsage | None:
        if isinstance(value, dict):
            return TokenUsage.from_wire(value)
        return None

    @field_validator("role", "model", "stop_reason", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None


class TranscriptLine(BaseModel):
    """One record of a line-delimited transcript."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    type: str
    uuid: str | None = None
    parent_uuid: str | None = Field(default=None, alias="parentUuid")
    is_sidechain: StrictBool = Field(default=False, alias="isSidechain")
    timestamp: str
    message: TranscriptMessage | None = None

    @field_validator("is_sidechain", mode="before")
    @classmethod
    def _default_sidechain(cls, value: Any) -> Any:
        return False if value is None else value


def decode_line(line: str) -> TranscriptLine:
    """
    Decode one transcript line.

    Args:
        line: A single line expected to hold one JSON object.

    Returns:
        The decoded record.

    Raises:
        LineDecodeError: If the line is not JSON, not an object, or lacks
            ``sessionId``, ``type`` or ``timestamp``.
    """
    try:
        return TranscriptLine.model_validate_json(line)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'line'}: {err['msg']}"
            for err in e.errors()
        )
        raise LineDecodeError(problems) from e


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO 8601 timestamp such as ``2024-01-01T00:00:00.000Z``.

    Fractional seconds are optional; a UTC offset or ``Z`` suffix is required.

    Raises:
        TimestampParseError: If the value cannot be parsed.
    """
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as e:
        raise TimestampParseError(f"Invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        raise TimestampParseError(f"Timestamp has no UTC offset: {value!r}")
    return parsed
