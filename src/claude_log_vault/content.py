"""Content blocks carried by transcript messages."""

import json
import logging
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .values import Value, decode_value, encode_value, value_to_string

logger = logging.getLogger(__name__)


class BlockKind(str, Enum):
    """Recognized content block types."""

    TEXT = "text"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"
    OTHER = "other"


class ContentBlock(BaseModel):
    """
    One item of a message's content.

    Optional fields are ``None`` when the transcript omitted them; an empty
    string means the field was present but empty.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    text: str | None = None
    id: str | None = None
    name: str | None = None
    input: dict[str, Value] | None = None
    content: str | None = None
    tool_use_id: str | None = None

    @property
    def kind(self) -> BlockKind:
        """Map the raw type tag onto a known kind, or OTHER."""
        try:
            return BlockKind(self.type)
        except ValueError:
            return BlockKind.OTHER

    @property
    def display_text(self) -> str | None:
        """Text carried by this block, if any."""
        return self.text if self.text is not None else self.content

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "ContentBlock":
        """
        Decode a block from its JSON object form.

        Raises:
            ValueError: If the block has no string ``type`` tag.
        """
        block_type = data.get("type")
        if not isinstance(block_type, str):
            raise ValueError(f"content block has no type tag: {data!r:.80}")

        raw_input = data.get("input")
        block_input = None
        if isinstance(raw_input, dict):
            block_input = {str(key): decode_value(value) for key, value in raw_input.items()}

        return cls(
            type=block_type,
            text=_optional_str(data.get("text")),
            id=_optional_str(data.get("id")),
            name=_optional_str(data.get("name")),
            input=block_input,
            content=_result_text(data.get("content")),
            tool_use_id=_optional_str(data.get("tool_use_id")),
        )

    def to_wire(self) -> dict[str, Any]:
        """Encode the block, emitting only fields that are present."""
        data: dict[str, Any] = {"type": self.type}
        for field_name in ("text", "id", "name"):
            field_value = getattr(self, field_name)
            if field_value is not None:
                data[field_name] = field_value
        if self.input is not None:
            data["input"] = {key: encode_value(value) for key, value in self.input.items()}
        if self.content is not None:
            data["content"] = self.content
        if self.tool_use_id is not None:
            data["tool_use_id"] = self.tool_use_id
        return data

    def input_value_string(self, key: str) -> str | None:
        """Get a tool parameter rendered for display, or None if absent."""
        if self.input is None or key not in self.input:
            return None
        return value_to_string(self.input[key])


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _result_text(value: Any) -> str | None:
    """Tool results are stored as text; nested block lists are flattened."""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        parts = []
        for item in value:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
        return "\n".join(parts)
    return None


class AbsentContent(BaseModel):
    """The message carried no content."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["absent"] = "absent"


class TextContent(BaseModel):
    """The message content was a bare string."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["text"] = "text"
    text: str


class BlockContent(BaseModel):
    """The message content was an array of content blocks."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["blocks"] = "blocks"
    blocks: list[ContentBlock] = Field(default_factory=list)


MessageContent = Annotated[
    Union[AbsentContent, TextContent, BlockContent],
    Field(discriminator="kind"),
]


def decode_message_content(raw: Any) -> MessageContent:
    """
    Decode the polymorphic ``message.content`` field.

    Strings and arrays are recognized; null and any other shape are treated
    as absent. Array items that are not valid blocks are skipped.
    """
    if isinstance(raw, str):
        return TextContent(text=raw)
    if isinstance(raw, list):
        blocks = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                logger.debug(f"Skipping non-object content item {index}")
                continue
            try:
                blocks.append(ContentBlock.from_wire(item))
            except ValueError as e:
                logger.debug(f"Skipping content item {index}: {e}")
        return BlockContent(blocks=blocks)
    return AbsentContent()


def normalize_content(content: MessageContent) -> list[ContentBlock] | None:
    """
    Turn message content into a block list.

    A bare string becomes a single synthetic text block. Absent content
    returns None so callers can tell it apart from an empty array.
    """
    if isinstance(content, TextContent):
        return [ContentBlock(type=BlockKind.TEXT.value, text=content.text)]
    if isinstance(content, BlockContent):
        return list(content.blocks)
    return None


def encode_content(blocks: list[ContentBlock] | None) -> str | None:
    """Encode a block list into the opaque blob stored with a message."""
    if blocks is None:
        return None
    return json.dumps([block.to_wire() for block in blocks], ensure_ascii=False)


def decode_content(blob: str | None) -> list[ContentBlock]:
    """Decode a stored content blob. Missing or corrupt blobs yield no blocks."""
    if blob is None:
        return []
    try:
        data = json.loads(blob)
    except json.JSONDecodeError as e:
        logger.warning(f"Stored content blob is not valid JSON: {e}")
        return []
    if not isinstance(data, list):
        return []
    return [
        ContentBlock.from_wire(item)
        for item in data
        if isinstance(item, dict) and isinstance(item.get("type"), str)
    ]
