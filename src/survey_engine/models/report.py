"""Report document models.

A report is the per-session ledger persisted as a single JSON document:

  - ``conversation``: the full transcript in insertion order
  - ``data``: every value extracted from client messages

The models are plain pydantic containers.  All mutation goes through the
functions in :mod:`survey_engine.report`, which enforce the freeform
uniqueness rule.
"""

from typing import Literal

from pydantic import BaseModel, Field


class ConversationEntry(BaseModel):
    """One message of the transcript."""

    id: str
    author: Literal["agent", "client"]
    text: str
    # Agent entries: the question this message asks (None once completed)
    question_id: int | None = None
    # Client entries: data records written from this message
    data_id: str | None = None
    data_ids: list[str] | None = None
    answer_id: str | None = None


class DataEntry(BaseModel):
    """One stored value.

    ``freeform`` entries answer the question being asked and are unique per
    key.  ``extracted`` entries are inferred for other questions and are
    never deduplicated.
    """

    id: str
    key: str
    value: str
    type: Literal["freeform", "extracted"]


class Report(BaseModel):
    """Conversation and data ledgers of one session."""

    conversation: list[ConversationEntry] = Field(default_factory=list)
    data: list[DataEntry] = Field(default_factory=list)


class QAPair(BaseModel):
    """An agent question and the client message that followed it."""

    question: str
    answer: str
