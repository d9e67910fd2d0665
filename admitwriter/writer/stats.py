"""Word, paragraph and reading-time statistics for generated documents."""

from __future__ import annotations

import math
import re

from pydantic import BaseModel, ConfigDict

WORDS_PER_MINUTE = 200

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def count_words(text: str) -> int:
    return len(text.split())


class DocumentStats(BaseModel):
    """Summary numbers shown next to a document and stored with it."""

    model_config = ConfigDict(frozen=True)

    word_count: int
    char_count: int
    paragraph_count: int
    reading_minutes: int
    word_limit: int | None = None

    @property
    def over_limit(self) -> bool:
        return self.word_limit is not None and self.word_count > self.word_limit

    @property
    def words_over(self) -> int:
        if self.word_limit is None:
            return 0
        return max(0, self.word_count - self.word_limit)

    @classmethod
    def from_text(cls, text: str, word_limit: int | None = None) -> DocumentStats:
        words = count_words(text)
        paragraphs = [p for p in _PARAGRAPH_BREAK.split(text) if p.strip()]
        return cls(
            word_count=words,
            char_count=len(text),
            paragraph_count=len(paragraphs),
            reading_minutes=math.ceil(words / WORDS_PER_MINUTE),
            word_limit=word_limit,
        )
