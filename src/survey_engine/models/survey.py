"""Survey definition models.

A survey is an ordered list of question templates.  Each template names the
``data_key`` its answer is stored under and carries three message templates:

  - ``question_template``: what to ask
  - ``success_template``: acknowledgement once the key is answered
  - ``fail_template``: retry prompt when nothing could be extracted

Templates are immutable once loaded.  At most one template is ``final``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuestionTemplate(BaseModel):
    """One question of a survey."""

    model_config = ConfigDict(frozen=True)

    id: int
    order: int
    data_key: str
    # "freeform" for open text; other values are passed to the language
    # collaborator as a hint about the expected shape of the answer.
    type: str = "freeform"
    question_template: str
    success_template: str
    fail_template: str
    final: bool = False


class Survey(BaseModel):
    """A survey and its question templates, addressed by ``external_id``."""

    model_config = ConfigDict(frozen=True)

    external_id: str
    name: str = ""
    lang: Literal["en", "ru"] = "en"
    questions: list[QuestionTemplate] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_questions(self) -> "Survey":
        orders = [q.order for q in self.questions]
        if len(orders) != len(set(orders)):
            raise ValueError(
                f"Survey {self.external_id!r} has duplicate question order values"
            )
        ids = [q.id for q in self.questions]
        if len(ids) != len(set(ids)):
            raise ValueError(
                f"Survey {self.external_id!r} has duplicate question ids"
            )
        if sum(1 for q in self.questions if q.final) > 1:
            raise ValueError(
                f"Survey {self.external_id!r} has more than one final question"
            )
        return self

    @property
    def ordered_questions(self) -> list[QuestionTemplate]:
        """Questions sorted by ``order`` ascending."""
        return sorted(self.questions, key=lambda q: q.order)

    @property
    def final_question(self) -> QuestionTemplate | None:
        return final_question(self.questions)

    def get_question(self, question_id: int) -> QuestionTemplate | None:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


def final_question(questions: list[QuestionTemplate]) -> QuestionTemplate | None:
    """The question marked ``final``, if any."""
    for q in questions:
        if q.final:
            return q
    return None
