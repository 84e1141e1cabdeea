"""Import transcripts into the store, at most once per session."""

import asyncio
import logging
import weakref
from pathlib import Path

import aiosqlite

from .errors import PersistenceError, TranscriptReadError
from .models import Conversation, ParsedTranscript
from .parser import parse_transcript
from .store import ConversationStore
from .titles import TitleGenerator

logger = logging.getLogger(__name__)


class ConversationImporter:
    """
    Parses transcripts and creates their conversations.

    Importing a transcript whose session identifier is already stored returns
    the stored conversation unchanged: nothing is merged, renamed or re-pathed.
    """

    def __init__(
        self, store: ConversationStore, title_generator: TitleGenerator | None = None
    ) -> None:
        self._store = store
        self._titles = title_generator
        self._session_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def import_file(self, path: str | Path) -> Conversation:
        """
        Read and import a transcript file.

        Raises:
            TranscriptReadError: If the file cannot be read.
            NoSessionIdError: If no line of the file is a valid record.
            PersistenceError: If the store fails.
        """
        path = Path(path)
        try:
            data = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise TranscriptReadError(f"Could not read {path}: {e}") from e
        return await self.import_transcript(data, file_path=str(path))

    async def import_transcript(
        self, data: bytes | str, file_path: str | None = None
    ) -> Conversation:
        """
        Import transcript contents.

        Args:
            data: Raw transcript contents.
            file_path: Where the transcript came from, kept for reference only.

        Returns:
            The new conversation, or the existing one for the same session.
        """
        parsed = await asyncio.to_thread(parse_transcript, data)

        async with self._lock_for(parsed.session_id):
            existing = await self._find(parsed.session_id)
            if existing is not None:
                logger.info(
                    f"Conversation with session {parsed.session_id} already exists, "
                    "skipping import"
                )
                return existing
            conversation, created = await self._create(parsed, file_path)

        if not created:
            return conversation
        return await self._apply_generated_title(conversation)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        """Get the lock serializing imports of one session identifier."""
        lock = self._session_locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._session_locks[session_id] = lock
        return lock

    async def _find(self, session_id: str) -> Conversation | None:
        try:
            return await self._store.find_conversation_by_session_id(session_id)
        except aiosqlite.Error as e:
            raise PersistenceError(f"Could not look up session {session_id}: {e}") from e

    async def _create(
        self, parsed: ParsedTranscript, file_path: str | None
    ) -> tuple[Conversation, bool]:
        """Create the conversation. The flag is False if another writer won."""
        try:
            conversation = await self._store.create_conversation(
                parsed.session_id, file_path, parsed.messages
            )
            return conversation, True
        except aiosqlite.IntegrityError as e:
            # Another process created the same session between lookup and insert.
            existing = await self._find(parsed.session_id)
            if existing is None:
                raise PersistenceError(
                    f"Could not save session {parsed.session_id}: {e}"
                ) from e
            logger.info(f"Session {parsed.session_id} was imported concurrently, using it")
            return existing, False
        except aiosqlite.Error as e:
            raise PersistenceError(f"Could not save session {parsed.session_id}: {e}") from e

    async def _apply_generated_title(self, conversation: Conversation) -> Conversation:
        """Rename a new conversation with a generated title. Never fails the import."""
        if self._titles is None:
            return conversation
        try:
            title = await asyncio.to_thread(self._titles.generate_title, conversation.messages)
            if title and await self._store.rename_conversation(conversation.id, title):
                conversation.title = title
        except Exception as e:
            logger.warning(f"Title generation failed for {conversation.session_id}: {e}")
        return conversation
