"""FastMCP server for Claude Log Vault."""

import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import TRANSCRIPT_EXTENSION
from .errors import TranscriptImportError
from .importer import ConversationImporter
from .models import Conversation, Message
from .store import ConversationStore
from .titles import TitleGenerator, titles_enabled

logger = logging.getLogger(__name__)

# Create the MCP server
mcp = FastMCP("claude-log-vault")

_store: ConversationStore | None = None
_importer: ConversationImporter | None = None


async def get_store() -> ConversationStore:
    """Return the shared store, opening it on first use."""
    global _store
    if _store is None:
        _store = await ConversationStore.open()
    return _store


async def get_importer() -> ConversationImporter:
    """Return the shared importer, creating it on first use."""
    global _importer
    if _importer is None:
        generator = TitleGenerator() if titles_enabled() else None
        _importer = ConversationImporter(await get_store(), generator)
    return _importer


def _message_payload(message: Message, include_content: bool) -> dict:
    payload = {
        "uuid": message.uuid,
        "parent_uuid": message.parent_uuid,
        "kind": message.kind.value,
        "role": message.role.value,
        "timestamp": message.timestamp.isoformat(),
        "model": message.model,
        "is_sidechain": message.is_sidechain,
        "text": message.plain_text,
    }
    if message.token_usage is not None:
        payload["token_usage"] = message.token_usage.model_dump(exclude_none=True)
    if include_content:
        payload["content"] = [block.to_wire() for block in message.content]
    return payload


def _conversation_payload(
    conversation: Conversation, include_messages: bool = False, include_content: bool = False
) -> dict:
    payload = conversation.summary().model_dump(mode="json")
    if include_messages:
        payload["messages"] = [
            _message_payload(m, include_content) for m in conversation.chronological_messages()
        ]
    return payload


@mcp.tool()
async def import_transcript(file_path: str) -> dict:
    """
    Import a Claude conversation transcript (.jsonl) into the vault.

    Importing a transcript whose session was already imported returns the
    existing conversation without changes.

    Args:
        file_path: Path to the .jsonl transcript file

    Returns:
        The conversation summary, or an error message if the import failed
    """
    path = Path(file_path).expanduser()
    if path.suffix != TRANSCRIPT_EXTENSION:
        return {"imported": False, "error": f"Please provide a {TRANSCRIPT_EXTENSION} file"}

    importer = await get_importer()
    try:
        conversation = await importer.import_file(path)
    except TranscriptImportError as e:
        logger.warning(f"Import of {path} failed: {e}")
        return {"imported": False, "error": e.user_message}
    return {"imported": True, "conversation": _conversation_payload(conversation)}


@mcp.tool()
async def list_conversations() -> dict:
    """
    List imported conversations, newest first.

    Returns:
        Conversation summaries with title, session_id, creation time and message count
    """
    store = await get_store()
    summaries = await store.list_conversations()
    return {"conversations": [s.model_dump(mode="json") for s in summaries]}


@mcp.tool()
async def get_conversation(session_id: str, include_content: bool = False) -> dict:
    """
    Get an imported conversation with its messages in chronological order.

    Args:
        session_id: Session identifier of the conversation
        include_content: Include decoded content blocks for each message (default: false)

    Returns:
        The conversation and its messages, or an error if it is not found
    """
    store = await get_store()
    conversation = await store.find_conversation_by_session_id(session_id)
    if conversation is None:
        return {"error": f"No conversation with session {session_id}"}
    return _conversation_payload(
        conversation, include_messages=True, include_content=include_content
    )


@mcp.tool()
async def rename_conversation(session_id: str, title: str) -> dict:
    """
    Rename an imported conversation.

    Args:
        session_id: Session identifier of the conversation
        title: New display title

    Returns:
        Whether the conversation was renamed
    """
    store = await get_store()
    conversation = await store.find_conversation_by_session_id(session_id)
    if conversation is None:
        return {"renamed": False, "error": f"No conversation with session {session_id}"}
    return {"renamed": await store.rename_conversation(conversation.id, title)}


@mcp.tool()
async def delete_conversation(session_id: str) -> dict:
    """
    Delete an imported conversation and all of its messages.

    Args:
        session_id: Session identifier of the conversation

    Returns:
        Whether the conversation was deleted
    """
    store = await get_store()
    conversation = await store.find_conversation_by_session_id(session_id)
    if conversation is None:
        return {"deleted": False}
    return {"deleted": await store.delete_conversation(conversation.id)}


def main():
    """Run the MCP server."""
    logging.basicConfig(level=logging.INFO)
    mcp.run()


if __name__ == "__main__":
    main()
