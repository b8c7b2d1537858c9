"""QuestionProgressionEngine — decides what the agent says next.

Given the survey's question templates and the current report:

  - the next question is the first one (by ``order``) whose ``data_key`` is
    not answered yet, so questions answered ahead of time are skipped
  - the survey is complete when no unanswered question remains or the
    ``final`` question is answered

The outbound message is produced by the language collaborator from the
templates: the first question is only rephrased; later ones are combined
with the success template of the question just answered; completion
rephrases the final question's success template.

:meth:`record` applies a decision to the report (agent entry) and the
session state (order / current question / completed).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from survey_engine.constants import DEFAULT_COMPLETION_MESSAGE
from survey_engine.interfaces import LanguageCollaborator
from survey_engine.models.language import DialogueContext
from survey_engine.models.report import ConversationEntry, Report
from survey_engine.models.session import SessionState
from survey_engine.models.survey import QuestionTemplate, final_question
from survey_engine.normalizer import ValueNormalizer, default_normalizer
from survey_engine.report import (
    append_conversation,
    build_history,
    flatten,
    is_answered,
    new_entry_id,
)

logger = logging.getLogger(__name__)


@dataclass
class Decision:
    """Outcome of :meth:`QuestionProgressionEngine.decide_next`."""

    next_question: QuestionTemplate | None
    message: str
    completed: bool


class QuestionProgressionEngine:
    """Chooses the next unanswered question and renders the agent message.

    Args:
        language: the :class:`LanguageCollaborator` rendering messages
        normalizer: shared with the merge engine so both agree on "answered"
    """

    def __init__(
        self,
        language: LanguageCollaborator,
        normalizer: ValueNormalizer | None = None,
    ) -> None:
        self._language = language
        self._normalizer = normalizer or default_normalizer

    # ------------------------------------------------------------------
    # Pure decisions
    # ------------------------------------------------------------------

    def next_unanswered(
        self, report: Report, questions: list[QuestionTemplate]
    ) -> QuestionTemplate | None:
        for question in sorted(questions, key=lambda q: q.order):
            if not is_answered(report, question.data_key, self._normalizer):
                return question
        return None

    def is_complete(self, report: Report, questions: list[QuestionTemplate]) -> bool:
        return self._final_answered(report, questions) or (
            self.next_unanswered(report, questions) is None
        )

    def _final_answered(self, report: Report, questions: list[QuestionTemplate]) -> bool:
        final = final_question(questions)
        return final is not None and is_answered(report, final.data_key, self._normalizer)

    # ------------------------------------------------------------------
    # Message rendering
    # ------------------------------------------------------------------

    async def decide_next(
        self,
        report: Report,
        questions: list[QuestionTemplate],
        *,
        answered: QuestionTemplate | None = None,
        lang: str = "en",
    ) -> Decision:
        """Pick the next question (or completion) and render the message.

        Args:
            answered: the question answered by the latest client message;
                its ``success_template`` prefixes the next question.  None
                for the opening question.
        """
        context = self.build_context(report, lang=lang)

        next_question = self.next_unanswered(report, questions)
        if next_question is None or self._final_answered(report, questions):
            final = final_question(questions)
            if final is not None:
                message = await self._language.rephrase_completion(
                    final.success_template, context,
                )
            else:
                message = DEFAULT_COMPLETION_MESSAGE
            logger.info("Survey complete (final question: %s)", final.id if final else None)
            return Decision(next_question=None, message=message, completed=True)

        rephrased = await self._language.rephrase_question(
            next_question.question_template, context,
        )
        if answered is not None:
            message = await self._language.combine_success_with_question(
                answered.success_template, rephrased, context,
            )
        else:
            message = rephrased

        logger.info(
            "Next question id=%s order=%s key=%s",
            next_question.id, next_question.order, next_question.data_key,
        )
        return Decision(next_question=next_question, message=message, completed=False)

    async def fail_message(
        self,
        question: QuestionTemplate,
        report: Report,
        *,
        lang: str = "en",
    ) -> str:
        """Retry message: the fail template combined with the re-asked question."""
        context = self.build_context(report, lang=lang)
        rephrased = await self._language.rephrase_question(
            question.question_template, context,
        )
        return await self._language.combine_fail_with_question(
            question.fail_template, rephrased, context,
        )

    # ------------------------------------------------------------------
    # State application
    # ------------------------------------------------------------------

    def record(
        self,
        report: Report,
        state: SessionState,
        decision: Decision,
    ) -> tuple[Report, SessionState]:
        """Append the agent message and advance the session state.

        Returns new objects; the inputs are not modified.
        """
        updated = report.model_copy(deep=True)
        append_conversation(updated, ConversationEntry(
            id=new_entry_id(),
            author="agent",
            text=decision.message,
            question_id=decision.next_question.id if decision.next_question else None,
        ))

        if decision.completed:
            new_state = state.model_copy(update={
                "completed": True,
                "current_question_id": None,
            })
        else:
            question = decision.next_question
            new_state = state.model_copy(update={
                "current_order": max(state.current_order, question.order),
                "current_question_id": question.id,
            })
        return updated, new_state

    @staticmethod
    def build_context(report: Report, *, lang: str = "en") -> DialogueContext:
        return DialogueContext(
            lang=lang,
            current_data_state=flatten(report),
            previous_conversation=build_history(report),
        )

