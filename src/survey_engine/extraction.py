"""ExtractionMergeEngine — merges values extracted from a client message.

One call per client turn:

  1. build an :class:`ExtractionRequest` (raw text, current question, every
     survey key, flattened data state, reconstructed Q/A history)
  2. ask the language collaborator to extract values
  3. classify each value; drop ``EMPTY`` ones
  4. current question's key → ``upsert_freeform``; any other survey key →
     ``append_extracted``
  5. append one ``client`` conversation entry referencing the written ids

The engine works on a deep copy of the report and returns it.  Persisting
the copy is the caller's job (one whole-document write per turn).

A collaborator result of None, or a mapping with no usable value at all,
is a failed extraction: the returned report differs from the input only by
the new client entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from survey_engine.interfaces import LanguageCollaborator
from survey_engine.models.language import DialogueContext, ExtractionRequest
from survey_engine.models.report import ConversationEntry, Report
from survey_engine.models.survey import QuestionTemplate
from survey_engine.normalizer import ValueNormalizer, default_normalizer
from survey_engine.report import (
    append_conversation,
    append_extracted,
    build_history,
    flatten,
    last_agent_question_id,
    new_entry_id,
    upsert_freeform,
)

logger = logging.getLogger(__name__)


@dataclass
class MergeOutcome:
    """Result of one extraction/merge pass."""

    report: Report
    # False when the collaborator produced no usable value
    extracted: bool
    data_ids: list[str] = field(default_factory=list)
    # Survey keys written this turn, in extraction order
    keys: list[str] = field(default_factory=list)


def resolve_current_question(
    report: Report,
    questions: list[QuestionTemplate],
    question_id: int | None = None,
) -> QuestionTemplate | None:
    """Find the question the client is answering.

    Uses ``question_id`` when given, else the last agent entry's
    ``question_id``, else the first question by order.
    """
    ordered = sorted(questions, key=lambda q: q.order)
    if not ordered:
        return None
    if question_id is None:
        question_id = last_agent_question_id(report)
    if question_id is not None:
        for q in ordered:
            if q.id == question_id:
                return q
        logger.warning("Question id %s not in survey, using first question", question_id)
    return ordered[0]


class ExtractionMergeEngine:
    """Extracts structured data from client text and merges it into a report.

    Args:
        language: the :class:`LanguageCollaborator` doing the extraction
        normalizer: classifies values as meaningful / none-equivalent / empty
    """

    def __init__(
        self,
        language: LanguageCollaborator,
        normalizer: ValueNormalizer | None = None,
    ) -> None:
        self._language = language
        self._normalizer = normalizer or default_normalizer

    async def extract_and_merge(
        self,
        report: Report,
        client_text: str,
        current_question: QuestionTemplate,
        questions: list[QuestionTemplate],
        *,
        lang: str = "en",
    ) -> MergeOutcome:
        """Run extraction for one client message and merge the result.

        Raises:
            CollaboratorUnavailableError: propagated from the collaborator;
                nothing is merged
        """
        request = self.build_request(
            report, client_text, current_question, questions, lang=lang,
        )
        extracted = await self._language.extract_data(request)

        updated = report.model_copy(deep=True)
        known_keys = {q.data_key for q in questions}
        data_ids: list[str] = []
        keys: list[str] = []

        for key, value in (extracted or {}).items():
            if key not in known_keys:
                logger.warning("Ignoring extracted value for unknown key %r", key)
                continue
            if not self._normalizer.counts_as_answer(value):
                continue
            if key == current_question.data_key:
                entry = upsert_freeform(updated, key, value)
            else:
                entry = append_extracted(updated, key, value)
            data_ids.append(entry.id)
            keys.append(key)
            logger.debug(
                "Merged %s value for key=%s (kind=%s)",
                entry.type, key, self._normalizer.classify(value).value,
            )

        append_conversation(updated, ConversationEntry(
            id=new_entry_id(),
            author="client",
            text=client_text,
            data_id=data_ids[0] if data_ids else None,
            data_ids=data_ids or None,
        ))

        if not data_ids:
            logger.info(
                "Extraction failed for key=%s (collaborator returned %s)",
                current_question.data_key,
                "None" if extracted is None else "no usable values",
            )
        return MergeOutcome(
            report=updated, extracted=bool(data_ids), data_ids=data_ids, keys=keys,
        )

    def build_request(
        self,
        report: Report,
        client_text: str,
        current_question: QuestionTemplate,
        questions: list[QuestionTemplate],
        *,
        lang: str = "en",
    ) -> ExtractionRequest:
        ordered = sorted(questions, key=lambda q: q.order)
        return ExtractionRequest(
            text=client_text,
            current_question_data_key=current_question.data_key,
            current_question_type=current_question.type,
            all_data_keys=[q.data_key for q in ordered],
            all_question_types=[q.type for q in ordered],
            context=DialogueContext(
                lang=lang,
                current_data_state=flatten(report),
                previous_conversation=build_history(report),
            ),
        )
