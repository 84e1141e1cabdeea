"""Best-effort conversation titles chosen from the opening messages."""

import logging
import os
import re
from collections.abc import Sequence

import numpy as np

from .config import (
    EMBEDDING_MODEL,
    TITLE_MAX_WORDS,
    TITLE_MIN_WORDS,
    TITLE_SOURCE_CHARS,
    TITLE_SOURCE_MESSAGES,
    TITLES_DISABLED_ENV,
)
from .models import MessageKind, ParsedMessage

logger = logging.getLogger(__name__)

_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+|\n+")
_STRIP_CHARS = re.compile(r"[\"'`*#_\[\](){}<>]")
_TRAILING_PUNCTUATION = ".,;:!?-"


def titles_enabled() -> bool:
    """Title generation is on unless disabled through the environment."""
    return not os.environ.get(TITLES_DISABLED_ENV)


def select_source_messages(messages: Sequence[ParsedMessage]) -> list[ParsedMessage]:
    """Pick the first user and assistant messages that carry text, in time order."""
    ordered = sorted(messages, key=lambda m: m.timestamp)
    selected = [
        m
        for m in ordered
        if m.kind in (MessageKind.USER, MessageKind.ASSISTANT) and m.plain_text
    ]
    return selected[:TITLE_SOURCE_MESSAGES]


def candidate_sentences(messages: Sequence[ParsedMessage]) -> list[str]:
    """Split the opening text of a conversation into candidate sentences."""
    text = "\n".join(m.plain_text or "" for m in messages)[:TITLE_SOURCE_CHARS]
    candidates = []
    for sentence in _SENTENCE_BREAK.split(text):
        sentence = sentence.strip()
        if len(sentence.split()) >= TITLE_MIN_WORDS:
            candidates.append(sentence)
    return candidates


def clean_title(sentence: str) -> str:
    """Reduce a sentence to a short title without quotes or punctuation."""
    words = _STRIP_CHARS.sub("", sentence).split()[:TITLE_MAX_WORDS]
    title = " ".join(words).rstrip(_TRAILING_PUNCTUATION).strip()
    return title[:1].upper() + title[1:]


class TitleGenerator:
    """
    Chooses a title by embedding candidate sentences and keeping the one
    closest to the centroid of the conversation opening.

    The model is loaded lazily. Any failure (model unavailable, encoding
    error, no usable text) yields None so callers keep their default title.
    """

    def __init__(self, model_name: str = EMBEDDING_MODEL):
        self._model_name = model_name
        self._model = None

    @property
    def model(self):
        """Lazy-load the sentence transformer model."""
        if self._model is None:
            from sentence_transformers import SentenceTransformer

            self._model = SentenceTransformer(self._model_name)
        return self._model

    def generate_title(self, messages: Sequence[ParsedMessage]) -> str | None:
        """
        Generate a title from the opening of a conversation.

        Args:
            messages: Conversation messages in any order.

        Returns:
            A short title, or None if none could be produced.
        """
        source = select_source_messages(messages)
        candidates = candidate_sentences(source)
        if not candidates:
            logger.warning("No text content found for title generation")
            return None

        if len(candidates) == 1:
            best = candidates[0]
        else:
            try:
                embeddings = self.model.encode(
                    candidates,
                    show_progress_bar=False,
                    convert_to_numpy=True,
                    normalize_embeddings=True,
                )
            except Exception as e:
                logger.warning(f"Failed to generate title: {e}")
                return None
            centroid = embeddings.mean(axis=0)
            scores = np.dot(embeddings, centroid)
            best = candidates[int(np.argmax(scores))]

        title = clean_title(best)
        if not title:
            return None
        logger.info(f"Generated title: {title}")
        return title
