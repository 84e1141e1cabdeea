"""Pydantic data models for Claude Log Vault."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .content import ContentBlock, decode_content


class MessageKind(str, Enum):
    """How a message is presented."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL_RESULT = "tool_result"


class MessageRole(str, Enum):
    """Who a message is attributed to."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class TokenUsage(BaseModel):
    """Token counts reported for a model response. None means not reported."""

    model_config = ConfigDict(frozen=True)

    input_tokens: int | None = None
    output_tokens: int | None = None
    cache_creation_input_tokens: int | None = None
    cache_read_input_tokens: int | None = None

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "TokenUsage":
        """Read usage counts, ignoring any that are not non-negative integers."""
        counts = {}
        for name in cls.model_fields:
            value = data.get(name)
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                counts[name] = value
        return cls(**counts)


class ParsedMessage(BaseModel):
    """A classified message decoded from a transcript, not yet stored."""

    model_config = ConfigDict(frozen=True)

    uuid: str
    parent_uuid: str | None = None
    kind: MessageKind
    role: MessageRole
    timestamp: datetime
    content_data: str | None = None  # JSON-encoded list of content blocks
    model: str | None = None
    token_usage: TokenUsage | None = None
    is_sidechain: bool = False

    @property
    def content(self) -> list[ContentBlock]:
        """Decode the stored content blocks."""
        return decode_content(self.content_data)

    @property
    def plain_text(self) -> str | None:
        """Newline-joined text of all text-bearing blocks."""
        if self.content_data is None:
            return None
        parts = [block.display_text for block in self.content]
        return "\n".join(part for part in parts if part is not None)


class Message(ParsedMessage):
    """A message owned by a stored conversation."""

    conversation_id: str


class ConversationSummary(BaseModel):
    """Conversation metadata without its messages."""

    id: str
    session_id: str
    title: str
    created_at: datetime
    file_path: str | None = None
    message_count: int = 0


class Conversation(BaseModel):
    """An imported conversation and its messages."""

    id: str
    session_id: str
    title: str
    created_at: datetime
    file_path: str | None = None
    messages: list[Message] = Field(default_factory=list)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def first_user_message(self) -> Message | None:
        """The first user-typed message in source order."""
        return next((m for m in self.messages if m.kind == MessageKind.USER), None)

    def chronological_messages(self) -> list[Message]:
        """Messages sorted by timestamp, ties kept in source order."""
        return sorted(self.messages, key=lambda m: m.timestamp)

    def summary(self) -> ConversationSummary:
        return ConversationSummary(
            id=self.id,
            session_id=self.session_id,
            title=self.title,
            created_at=self.created_at,
            file_path=self.file_path,
            message_count=self.message_count,
        )


class ParseStats(BaseModel):
    """Counters describing how a transcript was parsed."""

    total_lines: int = 0
    decoded_lines: int = 0
    malformed_lines: int = 0
    missing_uuid: int = 0
    missing_message: int = 0
    invalid_timestamps: int = 0
    messages: int = 0


class ParsedTranscript(BaseModel):
    """Result of parsing one transcript file."""

    session_id: str
    messages: list[ParsedMessage] = Field(default_factory=list)
    stats: ParseStats = Field(default_factory=ParseStats)
