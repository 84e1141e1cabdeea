"""Parse whole transcripts into classified messages."""

import logging

from .content import BlockKind, ContentBlock, encode_content, normalize_content
from .errors import (
    LineDecodeError,
    NoSessionIdError,
    TimestampParseError,
    TranscriptReadError,
)
from .models import (
    MessageKind,
    MessageRole,
    ParsedMessage,
    ParsedTranscript,
    ParseStats,
)
from .records import TranscriptLine, decode_line, parse_timestamp

logger = logging.getLogger(__name__)


def classify_record(
    line: TranscriptLine, blocks: list[ContentBlock] | None
) -> tuple[MessageKind, MessageRole]:
    """
    Decide the kind and role of a record.

    Precedence matters: a tool result wrapped in a user envelope is still a
    tool result, attributed to the user.
    """
    if blocks and any(block.kind == BlockKind.TOOL_RESULT for block in blocks):
        return MessageKind.TOOL_RESULT, MessageRole.USER
    if line.type == "user":
        return MessageKind.USER, MessageRole.USER
    nested_role = line.message.role if line.message else None
    if line.type == "assistant" or nested_role == "assistant":
        return MessageKind.ASSISTANT, MessageRole.ASSISTANT
    return MessageKind.SYSTEM, MessageRole.SYSTEM


def _decode_lines(text: str, stats: ParseStats) -> list[TranscriptLine]:
    """Decode every non-blank line, skipping ones that fail."""
    records = []
    for line_number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        stats.total_lines += 1
        try:
            records.append(decode_line(line))
        except LineDecodeError as e:
            stats.malformed_lines += 1
            logger.warning(f"Could not decode line {line_number}: {e}")
    stats.decoded_lines = len(records)
    return records


def _build_message(record: TranscriptLine, stats: ParseStats) -> ParsedMessage | None:
    """Turn a decoded record into a message, or None if it must be dropped."""
    if record.uuid is None:
        # Queue operations and similar control records carry no identity.
        stats.missing_uuid += 1
        logger.debug(f"Skipping {record.type!r} record without uuid")
        return None

    if record.message is None:
        stats.missing_message += 1
        logger.debug(f"Skipping record {record.uuid} without message body")
        return None

    try:
        timestamp = parse_timestamp(record.timestamp)
    except TimestampParseError as e:
        stats.invalid_timestamps += 1
        logger.warning(f"Skipping record {record.uuid}: {e}")
        return None

    blocks = normalize_content(record.message.content)
    kind, role = classify_record(record, blocks)
    if kind == MessageKind.TOOL_RESULT:
        logger.debug(f"Detected tool result message {record.uuid}")

    return ParsedMessage(
        uuid=record.uuid,
        parent_uuid=record.parent_uuid,
        kind=kind,
        role=role,
        timestamp=timestamp,
        content_data=encode_content(blocks),
        model=record.message.model if kind == MessageKind.ASSISTANT else None,
        token_usage=record.message.usage,
        is_sidechain=record.is_sidechain,
    )


def parse_transcript(data: bytes | str) -> ParsedTranscript:
    """
    Parse a line-delimited JSON transcript.

    Malformed lines are logged and skipped. The session identifier is taken
    from the first line that decodes.

    Args:
        data: Raw file contents, UTF-8 encoded if bytes.

    Returns:
        The session identifier, messages in source line order, and parse stats.

    Raises:
        TranscriptReadError: If the bytes are not valid UTF-8.
        NoSessionIdError: If no line decodes into a valid record.
    """
    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise TranscriptReadError(f"Transcript is not valid UTF-8: {e}") from e
    else:
        text = data

    stats = ParseStats()
    records = _decode_lines(text, stats)
    if not records:
        raise NoSessionIdError(
            f"No valid transcript records found ({stats.malformed_lines} malformed lines)"
        )
    session_id = records[0].session_id

    messages = []
    for record in records:
        message = _build_message(record, stats)
        if message is not None:
            messages.append(message)
    stats.messages = len(messages)

    logger.info(
        f"Parsed session {session_id}: {stats.messages} messages from {stats.total_lines} lines "
        f"({stats.malformed_lines} malformed, {stats.missing_uuid} without uuid, "
        f"{stats.invalid_timestamps} bad timestamps)"
    )
    return ParsedTranscript(session_id=session_id, messages=messages, stats=stats)
