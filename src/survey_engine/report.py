"""Report Store — accessors and mutators for a session's report document.

Pure functions over :class:`Report`; no I/O.  The mutators below are the only
code paths that write to ``report.data`` / ``report.conversation``:

    append_conversation   — append a transcript entry
    upsert_freeform       — at most one freeform entry per key
    append_extracted      — extracted entries accumulate, never deduplicated

Callers that need all-or-nothing semantics work on
``report.model_copy(deep=True)`` and persist the copy once.

Flatten precedence (one value per key):
    1. the freeform entry for the key, if any
    2. otherwise the *first-inserted* extracted entry
"""

from __future__ import annotations

import json
import uuid
from typing import Any

from survey_engine.constants import EXTRACTED, FREEFORM
from survey_engine.models.report import (
    ConversationEntry,
    DataEntry,
    QAPair,
    Report,
)
from survey_engine.normalizer import ValueNormalizer, default_normalizer


def new_entry_id() -> str:
    """Opaque unique id for conversation and data entries."""
    return uuid.uuid4().hex


def to_stored_value(value: Any) -> str:
    """Serialise an extracted value for ``DataEntry.value``.

    Strings are kept verbatim; other JSON values are dumped.
    """
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


# ------------------------------------------------------------------
# Accessors
# ------------------------------------------------------------------

def flatten(report: Report) -> dict[str, str]:
    """Return a single value per key (freeform first, then first extracted)."""
    chosen: dict[str, DataEntry] = {}
    for entry in report.data:
        existing = chosen.get(entry.key)
        if existing is None or (
            existing.type == EXTRACTED and entry.type == FREEFORM
        ):
            chosen[entry.key] = entry
    return {key: entry.value for key, entry in chosen.items()}


def is_answered(
    report: Report,
    data_key: str,
    normalizer: ValueNormalizer | None = None,
) -> bool:
    """True once any entry for ``data_key`` holds an answer.

    None-equivalent values ("none", "нет") count as answered.
    """
    normalizer = normalizer or default_normalizer
    return any(
        entry.key == data_key and normalizer.counts_as_answer(entry.value)
        for entry in report.data
    )


def find_freeform(report: Report, key: str) -> DataEntry | None:
    for entry in report.data:
        if entry.key == key and entry.type == FREEFORM:
            return entry
    return None


def build_history(report: Report) -> list[QAPair]:
    """Pair each agent message with the next client message.

    Agent messages without a following client reply are dropped; a later
    agent message replaces an unanswered earlier one.
    """
    pairs: list[QAPair] = []
    pending: str | None = None
    for entry in report.conversation:
        if entry.author == "agent":
            pending = entry.text
        elif pending is not None:
            pairs.append(QAPair(question=pending, answer=entry.text))
            pending = None
    return pairs


def last_agent_question_id(report: Report) -> int | None:
    """``question_id`` of the most recent agent entry, if any."""
    for entry in reversed(report.conversation):
        if entry.author == "agent":
            return entry.question_id
    return None


# ------------------------------------------------------------------
# Mutators
# ------------------------------------------------------------------

def append_conversation(report: Report, entry: ConversationEntry) -> ConversationEntry:
    report.conversation.append(entry)
    return entry


def upsert_freeform(report: Report, key: str, value: Any) -> DataEntry:
    """Write the freeform answer for ``key``, replacing the value in place.

    The existing entry keeps its id, so at most one freeform entry per key
    exists at any time.
    """
    stored = to_stored_value(value)
    existing = find_freeform(report, key)
    if existing is not None:
        existing.value = stored
        return existing
    entry = DataEntry(id=new_entry_id(), key=key, value=stored, type=FREEFORM)
    report.data.append(entry)
    return entry


def append_extracted(report: Report, key: str, value: Any) -> DataEntry:
    """Record one inference event for ``key`` as a new entry."""
    entry = DataEntry(
        id=new_entry_id(),
        key=key,
        value=to_stored_value(value),
        type=EXTRACTED,
    )
    report.data.append(entry)
    return entry
