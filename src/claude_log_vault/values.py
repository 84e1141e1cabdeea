"""Tagged representation of arbitrary JSON values found in tool parameters."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .config import (
    INLINE_MAPPING_MAX_KEYS,
    INLINE_MAPPING_MAX_WIDTH,
    INLINE_SEQUENCE_MAX_ITEMS,
    MAX_DISPLAY_STRING_LENGTH,
)


class NullValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["null"] = "null"


class BoolValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["bool"] = "bool"
    value: bool


class IntValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["int"] = "int"
    value: int


class FloatValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["float"] = "float"
    value: float


class StringValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["string"] = "string"
    value: str


class ArrayValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["array"] = "array"
    items: list["Value"] = Field(default_factory=list)


class ObjectValue(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["object"] = "object"
    entries: dict[str, "Value"] = Field(default_factory=dict)


Value = Annotated[
    Union[NullValue, BoolValue, IntValue, FloatValue, StringValue, ArrayValue, ObjectValue],
    Field(discriminator="kind"),
]

ArrayValue.model_rebuild()
ObjectValue.model_rebuild()


def decode_value(raw: Any) -> Value:
    """
    Decode a value produced by ``json.loads`` into its tagged form.

    Shapes are tried in order: boolean, integer, float, string, sequence,
    mapping. Booleans go first because ``bool`` is a subclass of ``int``.
    Anything unrecognized (including non-string mapping keys) becomes null.
    """
    if isinstance(raw, bool):
        return BoolValue(value=raw)
    if isinstance(raw, int):
        return IntValue(value=raw)
    if isinstance(raw, float):
        return FloatValue(value=raw)
    if isinstance(raw, str):
        return StringValue(value=raw)
    if isinstance(raw, list):
        return ArrayValue(items=[decode_value(item) for item in raw])
    if isinstance(raw, dict) and all(isinstance(key, str) for key in raw):
        return ObjectValue(entries={key: decode_value(item) for key, item in raw.items()})
    return NullValue()


def encode_value(value: Value) -> Any:
    """Encode a tagged value back into plain JSON-compatible Python data."""
    if isinstance(value, (BoolValue, IntValue, FloatValue, StringValue)):
        return value.value
    if isinstance(value, ArrayValue):
        return [encode_value(item) for item in value.items]
    if isinstance(value, ObjectValue):
        return {key: encode_value(item) for key, item in value.entries.items()}
    return None


def value_to_string(value: Value, indent_level: int = 0) -> str:
    """
    Render a value for human display.

    This is lossy (long strings are truncated) and must not be used to
    serialize values.

    Args:
        value: The value to render.
        indent_level: Nesting depth, two spaces per level for multi-line output.

    Returns:
        The rendered text.
    """
    indent = "  " * indent_level

    if isinstance(value, BoolValue):
        return "true" if value.value else "false"

    if isinstance(value, (IntValue, FloatValue)):
        return str(value.value)

    if isinstance(value, StringValue):
        if len(value.value) > MAX_DISPLAY_STRING_LENGTH:
            return value.value[:MAX_DISPLAY_STRING_LENGTH] + "..."
        return value.value

    if isinstance(value, ArrayValue):
        if not value.items:
            return "[]"
        if len(value.items) <= INLINE_SEQUENCE_MAX_ITEMS:
            items = [value_to_string(item, indent_level) for item in value.items]
            return f"[{', '.join(items)}]"
        lines = [f"{indent}  - {value_to_string(item, indent_level + 1)}" for item in value.items]
        return "[\n" + "\n".join(lines) + f"\n{indent}]"

    if isinstance(value, ObjectValue):
        if not value.entries:
            return "{}"
        keys = sorted(value.entries)
        if len(keys) <= INLINE_MAPPING_MAX_KEYS:
            pairs = [
                f"{key}: {value_to_string(value.entries[key], indent_level)}" for key in keys
            ]
            inline = f"{{ {', '.join(pairs)} }}"
            if len(inline) <= INLINE_MAPPING_MAX_WIDTH:
                return inline
        lines = [
            f"{indent}  {key}: {value_to_string(value.entries[key], indent_level + 1)}"
            for key in keys
        ]
        return "{\n" + "\n".join(lines) + f"\n{indent}}}"

    return "null"
