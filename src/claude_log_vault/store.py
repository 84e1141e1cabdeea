"""SQLite-backed store for imported conversations."""

import logging
import os
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

import aiosqlite

from .config import DB_FILE, DB_PATH_ENV
from .db import Database, Transaction
from .models import (
    Conversation,
    ConversationSummary,
    Message,
    MessageKind,
    MessageRole,
    ParsedMessage,
    TokenUsage,
)

logger = logging.getLogger(__name__)

_MESSAGE_COLUMNS = (
    "conversation_id, position, uuid, parent_uuid, kind, role, timestamp, content_data, "
    "model, input_tokens, output_tokens, cache_creation_input_tokens, "
    "cache_read_input_tokens, has_usage, is_sidechain"
)


def get_db_path() -> Path:
    """Get the database path, honoring the environment override."""
    override = os.environ.get(DB_PATH_ENV)
    if override:
        return Path(override).expanduser()
    return DB_FILE


class ConversationStore:
    """
    Durable conversations keyed by session identifier.

    At most one conversation exists per session identifier; the schema
    enforces it with a UNIQUE constraint, so a racing create raises
    ``aiosqlite.IntegrityError``.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    @classmethod
    async def open(cls, path: str | Path | None = None) -> "ConversationStore":
        """Open (and create if needed) the store at ``path``."""
        db = await Database.connect(path if path is not None else get_db_path())
        return cls(db)

    async def close(self) -> None:
        await self._db.close()

    # ------------------------------------------------------------------
    # Import contract
    # ------------------------------------------------------------------

    async def find_conversation_by_session_id(self, session_id: str) -> Conversation | None:
        """Get the conversation for a session identifier, with its messages."""
        row = await self._db.fetchone(
            "SELECT * FROM conversations WHERE session_id = ?", (session_id,)
        )
        if row is None:
            return None
        return await self._load_conversation(row)

    async def create_conversation(
        self,
        session_id: str,
        file_path: str | None = None,
        messages: Sequence[ParsedMessage] = (),
    ) -> Conversation:
        """
        Create a conversation and attach its messages in one transaction.

        Either the conversation and all of its messages are committed, or
        nothing is.

        Raises:
            aiosqlite.IntegrityError: If the session identifier already exists.
        """
        conversation = Conversation(
            id=str(uuid4()),
            session_id=session_id,
            title=session_id,
            created_at=datetime.now(UTC),
            file_path=file_path,
        )
        async with self._db.transaction() as tx:
            await tx.execute(
                """
                INSERT INTO conversations (id, session_id, title, created_at, file_path)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    conversation.id,
                    conversation.session_id,
                    conversation.title,
                    conversation.created_at.isoformat(),
                    conversation.file_path,
                ),
            )
            stored = await self._insert_messages(tx, conversation.id, messages, start=0)
        conversation.messages = stored
        logger.info(f"Created conversation {conversation.id} for session {session_id}")
        return conversation

    async def insert_messages(
        self, conversation: Conversation, messages: Sequence[ParsedMessage]
    ) -> list[Message]:
        """Append messages to an existing conversation as one atomic batch."""
        async with self._db.transaction() as tx:
            row = await tx.fetchone(
                "SELECT COALESCE(MAX(position) + 1, 0) AS next FROM messages "
                "WHERE conversation_id = ?",
                (conversation.id,),
            )
            start = row["next"] if row is not None else 0
            stored = await self._insert_messages(tx, conversation.id, messages, start=start)
        conversation.messages.extend(stored)
        return stored

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        row = await self._db.fetchone(
            "SELECT * FROM conversations WHERE id = ?", (conversation_id,)
        )
        if row is None:
            return None
        return await self._load_conversation(row)

    async def list_conversations(self) -> list[ConversationSummary]:
        """List all conversations, newest first."""
        rows = await self._db.fetchall(
            """
            SELECT c.*, COUNT(m.row_id) AS message_count
            FROM conversations c
            LEFT JOIN messages m ON m.conversation_id = c.id
            GROUP BY c.id
            ORDER BY c.created_at DESC
            """
        )
        return [
            ConversationSummary(
                id=row["id"],
                session_id=row["session_id"],
                title=row["title"],
                created_at=datetime.fromisoformat(row["created_at"]),
                file_path=row["file_path"],
                message_count=row["message_count"],
            )
            for row in rows
        ]

    async def get_messages(self, conversation_id: str) -> list[Message]:
        """Get a conversation's messages in source order."""
        rows = await self._db.fetchall(
            "SELECT * FROM messages WHERE conversation_id = ? ORDER BY position",
            (conversation_id,),
        )
        return [self._row_to_message(row) for row in rows]

    async def rename_conversation(self, conversation_id: str, title: str) -> bool:
        """Set a conversation's display title. Returns False if it doesn't exist."""
        cursor = await self._db.execute(
            "UPDATE conversations SET title = ? WHERE id = ?", (title, conversation_id)
        )
        return cursor.rowcount > 0

    async def delete_conversation(self, conversation_id: str) -> bool:
        """Delete a conversation and, by cascade, all of its messages."""
        cursor = await self._db.execute(
            "DELETE FROM conversations WHERE id = ?", (conversation_id,)
        )
        deleted = cursor.rowcount > 0
        if deleted:
            logger.info(f"Deleted conversation {conversation_id}")
        return deleted

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _load_conversation(self, row: aiosqlite.Row) -> Conversation:
        return Conversation(
            id=row["id"],
            session_id=row["session_id"],
            title=row["title"],
            created_at=datetime.fromisoformat(row["created_at"]),
            file_path=row["file_path"],
            messages=await self.get_messages(row["id"]),
        )

    @staticmethod
    async def _insert_messages(
        tx: Transaction,
        conversation_id: str,
        messages: Sequence[ParsedMessage],
        start: int,
    ) -> list[Message]:
        stored = [
            Message(
                conversation_id=conversation_id,
                **message.model_dump(exclude={"conversation_id"}),
            )
            for message in messages
        ]
        await tx.executemany(
            f"INSERT INTO messages ({_MESSAGE_COLUMNS}) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                ConversationStore._message_params(message, position)
                for position, message in enumerate(stored, start=start)
            ],
        )
        return stored

    @staticmethod
    def _message_params(message: Message, position: int) -> tuple:
        usage = message.token_usage or TokenUsage()
        return (
            message.conversation_id,
            position,
            message.uuid,
            message.parent_uuid,
            message.kind.value,
            message.role.value,
            message.timestamp.isoformat(),
            message.content_data,
            message.model,
            usage.input_tokens,
            usage.output_tokens,
            usage.cache_creation_input_tokens,
            usage.cache_read_input_tokens,
            int(message.token_usage is not None),
            int(message.is_sidechain),
        )

    @staticmethod
    def _row_to_message(row: aiosqlite.Row) -> Message:
        token_usage = None
        if row["has_usage"]:
            token_usage = TokenUsage(
                input_tokens=row["input_tokens"],
                output_tokens=row["output_tokens"],
                cache_creation_input_tokens=row["cache_creation_input_tokens"],
                cache_read_input_tokens=row["cache_read_input_tokens"],
            )
        return Message(
            conversation_id=row["conversation_id"],
            uuid=row["uuid"],
            parent_uuid=row["parent_uuid"],
            kind=MessageKind(row["kind"]),
            role=MessageRole(row["role"]),
            timestamp=datetime.fromisoformat(row["timestamp"]),
            content_data=row["content_data"],
            model=row["model"],
            token_usage=token_usage,
            is_sidechain=bool(row["is_sidechain"]),
        )
