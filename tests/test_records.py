"""Tests for single-line record decoding."""

import json
from datetime import UTC, datetime

import pytest
from conftest import make_line

from claude_log_vault.content import AbsentContent, BlockContent, TextContent
from claude_log_vault.errors import LineDecodeError, TimestampParseError
from claude_log_vault.records import decode_line, parse_timestamp


class TestDecodeLine:
    """Tests for decode_line."""

    def test_decode_full_record(self):
        """Test all envelope and message fields are read."""
        record = make_line(
            uuid="u1",
            line_type="assistant",
            role="assistant",
            content=[{"type": "text", "text": "Done."}],
            parentUuid="u0",
            isSidechain=True,
        )
        record["message"].update(
            {
                "model": "claude-opus-4",
                "stop_reason": "end_turn",
                "usage": {"input_tokens": 10, "output_tokens": 5},
            }
        )
        line = decode_line(json.dumps(record))
        assert line.session_id == "afbb70e2-4360-432f-8b41-ec4adc3cad69"
        assert line.type == "assistant"
        assert line.uuid == "u1"
        assert line.parent_uuid == "u0"
        assert line.is_sidechain is True
        assert line.message.role == "assistant"
        assert line.message.model == "claude-opus-4"
        assert line.message.stop_reason == "end_turn"
        assert line.message.usage.input_tokens == 10
        assert line.message.usage.cache_read_input_tokens is None
        assert isinstance(line.message.content, BlockContent)

    def test_optional_fields_default(self):
        """Test absent optional fields take their defaults."""
        line = decode_line(
            '{"sessionId": "s", "type": "system", "timestamp": "2024-01-01T00:00:00.000Z"}'
        )
        assert line.uuid is None
        assert line.parent_uuid is None
        assert line.is_sidechain is False
        assert line.message is None

    def test_null_sidechain_defaults_false(self):
        """Test an explicit null sidechain flag defaults to false."""
        line = decode_line(json.dumps(make_line(isSidechain=None)))
        assert line.is_sidechain is False

    def test_string_content(self):
        """Test bare string content decodes as text content."""
        line = decode_line(json.dumps(make_line(content="hi")))
        assert line.message.content == TextContent(text="hi")

    def test_missing_content(self):
        """Test absent content decodes as absent."""
        line = decode_line(json.dumps(make_line()))
        assert line.message.content == AbsentContent()

    def test_usage_with_bad_counts(self):
        """Test usage counts that are not non-negative integers are not reported."""
        record = make_line(content="x")
        record["message"]["usage"] = {
            "input_tokens": -1,
            "output_tokens": "5",
            "cache_read_input_tokens": 7,
        }
        line = decode_line(json.dumps(record))
        assert line.message.usage.input_tokens is None
        assert line.message.usage.output_tokens is None
        assert line.message.usage.cache_read_input_tokens == 7

    def test_usage_not_object(self):
        """Test a usage value that is not an object is absent."""
        record = make_line(content="x")
        record["message"]["usage"] = [1, 2]
        assert decode_line(json.dumps(record)).message.usage is None

    @pytest.mark.parametrize(
        "line",
        [
            "not json at all",
            "[1, 2, 3]",
            '{"type": "user", "timestamp": "2024-01-01T00:00:00.000Z"}',
            '{"sessionId": "s", "type": "user"}',
            '{"sessionId": "s", "timestamp": "2024-01-01T00:00:00.000Z"}',
            '{"sessionId": 5, "type": "user", "timestamp": "2024-01-01T00:00:00.000Z"}',
            '{"sessionId": "s", "type": "user", "timestamp": "t", "message": "hello"}',
            '{"sessionId": "s", "type": "user", "timestamp": "t", "isSidechain": "yes"}',
        ],
    )
    def test_structurally_invalid(self, line):
        """Test structurally invalid lines raise LineDecodeError."""
        with pytest.raises(LineDecodeError):
            decode_line(line)


class TestParseTimestamp:
    """Tests for timestamp parsing."""

    def test_fractional_seconds_utc(self):
        """Test the transcript timestamp format."""
        ts = parse_timestamp("2024-01-01T00:00:00.123Z")
        assert ts == datetime(2024, 1, 1, 0, 0, 0, 123000, tzinfo=UTC)

    def test_without_fraction(self):
        """Test timestamps without fractional seconds are accepted."""
        assert parse_timestamp("2024-01-15T10:30:00Z").tzinfo is not None

    def test_offset(self):
        """Test explicit offsets are accepted."""
        ts = parse_timestamp("2024-01-15T10:30:00.000+02:00")
        assert ts.utcoffset().total_seconds() == 7200

    def test_naive_rejected(self):
        """Test timestamps without a UTC offset are rejected."""
        with pytest.raises(TimestampParseError):
            parse_timestamp("2024-01-15T10:30:00.000")

    def test_garbage_rejected(self):
        """Test unparseable timestamps are rejected."""
        with pytest.raises(TimestampParseError):
            parse_timestamp("yesterday")
