"""Claude Log Vault - Import Claude conversation transcripts into a durable store."""

from .content import BlockKind, ContentBlock
from .errors import (
    NoSessionIdError,
    PersistenceError,
    TranscriptImportError,
    TranscriptReadError,
)
from .importer import ConversationImporter
from .models import (
    Conversation,
    ConversationSummary,
    Message,
    MessageKind,
    MessageRole,
    ParsedMessage,
    ParsedTranscript,
    TokenUsage,
)
from .parser import parse_transcript
from .store import ConversationStore
from .titles import TitleGenerator
from .values import decode_value, encode_value, value_to_string

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BlockKind",
    "ContentBlock",
    "Conversation",
    "ConversationImporter",
    "ConversationStore",
    "ConversationSummary",
    "Message",
    "MessageKind",
    "MessageRole",
    "NoSessionIdError",
    "ParsedMessage",
    "ParsedTranscript",
    "PersistenceError",
    "TitleGenerator",
    "TokenUsage",
    "TranscriptImportError",
    "TranscriptReadError",
    "decode_value",
    "encode_value",
    "parse_transcript",
    "value_to_string",
]
