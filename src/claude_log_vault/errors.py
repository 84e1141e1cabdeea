"""Exceptions raised while importing transcripts."""


class TranscriptImportError(Exception):
    """Base class for failures that abort an import."""

    user_message = "The transcript could not be imported."


class TranscriptReadError(TranscriptImportError):
    """The transcript could not be read as UTF-8 text."""

    user_message = "The file could not be read."


class NoSessionIdError(TranscriptImportError):
    """No line of the transcript decoded into a valid record."""

    user_message = "The file is not a valid conversation transcript."


class PersistenceError(TranscriptImportError):
    """The store failed to look up or commit a conversation."""

    user_message = "The conversation could not be saved."


class LineDecodeError(ValueError):
    """A single transcript line is not a valid record."""


class TimestampParseError(ValueError):
    """A record timestamp is not ISO 8601 with a UTC offset."""
