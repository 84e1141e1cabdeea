"""Pytest fixtures for Claude Log Vault tests."""

import json

import pytest

from claude_log_vault.importer import ConversationImporter
from claude_log_vault.store import ConversationStore

SESSION_ID = "afbb70e2-4360-432f-8b41-ec4adc3cad69"


def make_line(
    uuid: str | None = "msg-001",
    line_type: str = "user",
    role: str | None = "user",
    content=None,
    session_id: str = SESSION_ID,
    timestamp: str = "2024-01-01T00:00:00.000Z",
    **extra,
) -> dict:
    """Build one transcript record."""
    record = {"sessionId": session_id, "type": line_type, "timestamp": timestamp}
    if uuid is not None:
        record["uuid"] = uuid
    message = {}
    if role is not None:
        message["role"] = role
    if content is not None:
        message["content"] = content
    record["message"] = message
    record.update(extra)
    return record


def to_jsonl(records: list) -> bytes:
    """Serialize records (dicts or raw strings) as a JSONL transcript."""
    lines = [r if isinstance(r, str) else json.dumps(r) for r in records]
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture
def sample_records():
    """A short coding session with a tool call and its result."""
    return [
        {
            "type": "queue-operation",
            "operation": "enqueue",
            "sessionId": SESSION_ID,
            "timestamp": "2024-01-15T10:29:59.000Z",
        },
        make_line(
            uuid="msg-001",
            content="Help me fix a bug in the authentication module",
            timestamp="2024-01-15T10:30:00.000Z",
        ),
        make_line(
            uuid="msg-002",
            line_type="assistant",
            role="assistant",
            parentUuid="msg-001",
            timestamp="2024-01-15T10:30:05.123Z",
            content=[
                {"type": "text", "text": "I'll check the login code."},
                {
                    "type": "tool_use",
                    "id": "toolu_01",
                    "name": "Read",
                    "input": {"file_path": "/src/auth.py", "limit": 200},
                },
            ],
        ),
        make_line(
            uuid="msg-003",
            parentUuid="msg-002",
            timestamp="2024-01-15T10:30:06.000Z",
            content=[
                {
                    "type": "tool_result",
                    "tool_use_id": "toolu_01",
                    "content": "def login(user):\n    return None",
                }
            ],
        ),
        make_line(
            uuid="msg-004",
            line_type="assistant",
            role="assistant",
            parentUuid="msg-003",
            timestamp="2024-01-15T10:30:10.500Z",
            content=[{"type": "text", "text": "The login function never returns the user."}],
        ),
    ]


@pytest.fixture
def sample_records_with_model(sample_records):
    """The sample session with model and usage on assistant records."""
    for record in sample_records:
        if record["type"] == "assistant":
            record["message"]["model"] = "claude-sonnet-4-5"
            record["message"]["usage"] = {
                "input_tokens": 120,
                "output_tokens": 45,
                "cache_read_input_tokens": 1000,
            }
            record["message"]["stop_reason"] = "end_turn"
    return sample_records


@pytest.fixture
def sample_transcript(sample_records_with_model):
    """The sample session as raw JSONL bytes."""
    return to_jsonl(sample_records_with_model)


@pytest.fixture
def transcript_file(tmp_path, sample_transcript):
    """The sample session written to a .jsonl file."""
    path = tmp_path / f"{SESSION_ID}.jsonl"
    path.write_bytes(sample_transcript)
    return path


@pytest.fixture
async def store():
    """In-memory conversation store."""
    conversation_store = await ConversationStore.open(":memory:")
    yield conversation_store
    await conversation_store.close()


@pytest.fixture
def importer(store):
    """Importer without title generation."""
    return ConversationImporter(store)
