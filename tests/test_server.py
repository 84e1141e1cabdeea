"""Tests for MCP server tools."""

import pytest
from conftest import SESSION_ID

from claude_log_vault import server


@pytest.fixture(autouse=True)
def shared_store(monkeypatch, store, importer):
    """Point the server at the in-memory store and importer."""
    monkeypatch.setattr(server, "_store", store)
    monkeypatch.setattr(server, "_importer", importer)
    return store


class TestImportTool:
    """Tests for the import_transcript tool."""

    async def test_import(self, transcript_file):
        """Test importing a transcript file returns its summary."""
        result = await server.import_transcript(str(transcript_file))
        assert result["imported"] is True
        conversation = result["conversation"]
        assert conversation["session_id"] == SESSION_ID
        assert conversation["message_count"] == 4
        assert conversation["file_path"] == str(transcript_file)

    async def test_wrong_extension_rejected(self, tmp_path, shared_store):
        """Test files without the transcript extension are not read."""
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        result = await server.import_transcript(str(path))
        assert result == {"imported": False, "error": "Please provide a .jsonl file"}
        assert await shared_store.list_conversations() == []

    async def test_invalid_transcript(self, tmp_path):
        """Test an invalid transcript reports a user-facing message."""
        path = tmp_path / "broken.jsonl"
        path.write_text("not json\n")
        result = await server.import_transcript(str(path))
        assert result == {
            "imported": False,
            "error": "The file is not a valid conversation transcript.",
        }

    async def test_missing_file(self, tmp_path):
        """Test a missing file reports a read failure."""
        result = await server.import_transcript(str(tmp_path / "missing.jsonl"))
        assert result == {"imported": False, "error": "The file could not be read."}


class TestConversationTools:
    """Tests for the listing, lookup, rename and delete tools."""

    @pytest.fixture
    async def imported(self, transcript_file):
        return (await server.import_transcript(str(transcript_file)))["conversation"]

    async def test_list_conversations(self, imported):
        """Test imported conversations are listed."""
        result = await server.list_conversations()
        assert [c["id"] for c in result["conversations"]] == [imported["id"]]

    async def test_list_empty(self):
        """Test an empty vault lists nothing."""
        assert await server.list_conversations() == {"conversations": []}

    async def test_get_conversation(self, imported):
        """Test a conversation is returned with messages and text."""
        result = await server.get_conversation(SESSION_ID)
        assert result["id"] == imported["id"]
        messages = result["messages"]
        assert [m["uuid"] for m in messages] == ["msg-001", "msg-002", "msg-003", "msg-004"]
        assert messages[0]["text"] == "Help me fix a bug in the authentication module"
        assert messages[1]["model"] == "claude-sonnet-4-5"
        assert messages[1]["token_usage"] == {
            "input_tokens": 120,
            "output_tokens": 45,
            "cache_read_input_tokens": 1000,
        }
        assert "token_usage" not in messages[0]
        assert "content" not in messages[0]

    async def test_get_conversation_with_content(self, imported):
        """Test content blocks are included on request."""
        result = await server.get_conversation(SESSION_ID, include_content=True)
        tool_use = result["messages"][1]["content"][1]
        assert tool_use["type"] == "tool_use"
        assert tool_use["name"] == "Read"
        assert tool_use["input"] == {"file_path": "/src/auth.py", "limit": 200}

    async def test_get_missing(self):
        """Test an unknown session reports an error."""
        result = await server.get_conversation("nope")
        assert "error" in result

    async def test_rename(self, imported):
        """Test renaming by session id."""
        assert await server.rename_conversation(SESSION_ID, "Auth bug") == {"renamed": True}
        result = await server.get_conversation(SESSION_ID)
        assert result["title"] == "Auth bug"

    async def test_rename_missing(self):
        """Test renaming an unknown session fails."""
        result = await server.rename_conversation("nope", "x")
        assert result["renamed"] is False

    async def test_delete(self, imported):
        """Test deleting by session id removes the conversation."""
        assert await server.delete_conversation(SESSION_ID) == {"deleted": True}
        assert await server.list_conversations() == {"conversations": []}

    async def test_delete_missing(self):
        """Test deleting an unknown session reports nothing deleted."""
        assert await server.delete_conversation("nope") == {"deleted": False}
