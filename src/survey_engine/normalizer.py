"""Answer value normalizer.

Classifies a value returned by the language collaborator into one of three
kinds so that merge and progression logic never inspect raw strings:

  - ``MEANINGFUL``: real content ("KCD-12", "will continue")
  - ``NONE_EQUIVALENT``: a deliberate "nothing" ("none", "нет проблем")
  - ``EMPTY``: no answer at all (``None``, ``{}``, blank string)

Both ``MEANINGFUL`` and ``NONE_EQUIVALENT`` count as an answer.
"""

from __future__ import annotations

import enum
from typing import Any, Iterable

from survey_engine.constants import NONE_PHRASES, NONE_TOKENS


class AnswerKind(str, enum.Enum):
    """Result of classifying an extracted value."""

    MEANINGFUL = "meaningful"
    NONE_EQUIVALENT = "none_equivalent"
    EMPTY = "empty"


class ValueNormalizer:
    """Recognises empty and none-equivalent answers.

    Args:
        tokens: whole-value matches (after strip + lowercase)
        phrases: substring matches (lowercase)
    """

    def __init__(
        self,
        tokens: Iterable[str] | None = None,
        phrases: Iterable[str] | None = None,
    ) -> None:
        self._tokens = frozenset(
            t.lower() for t in (NONE_TOKENS if tokens is None else tokens)
        )
        self._phrases = tuple(
            p.lower() for p in (NONE_PHRASES if phrases is None else phrases)
        )

    def classify(self, value: Any) -> AnswerKind:
        if value is None:
            return AnswerKind.EMPTY
        if isinstance(value, (dict, list, tuple)) and len(value) == 0:
            return AnswerKind.EMPTY
        if isinstance(value, str):
            lowered = value.strip().lower()
            if not lowered:
                return AnswerKind.EMPTY
            if lowered in self._tokens:
                return AnswerKind.NONE_EQUIVALENT
            if any(phrase in lowered for phrase in self._phrases):
                return AnswerKind.NONE_EQUIVALENT
        return AnswerKind.MEANINGFUL

    def counts_as_answer(self, value: Any) -> bool:
        """True for meaningful and none-equivalent values."""
        return self.classify(value) is not AnswerKind.EMPTY


# Shared instance built from the module-level constants.
default_normalizer = ValueNormalizer()
