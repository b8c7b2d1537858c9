"""PassthroughLanguage — language collaborator without a model.

Used in tests and in environments without a live LLM:

  - rephrasing returns the template unchanged
  - combining joins the two messages with a blank line
  - extraction assigns the whole message to the current question's key
"""

import logging
from typing import Any

from survey_engine.interfaces import LanguageCollaborator
from survey_engine.models.language import DialogueContext, ExtractionRequest

logger = logging.getLogger(__name__)


class PassthroughLanguage(LanguageCollaborator):
    """Deterministic no-op implementation of :class:`LanguageCollaborator`."""

    async def extract_data(self, request: ExtractionRequest) -> dict[str, Any] | None:
        logger.debug(
            "Passthrough extraction for key=%s (history=%d)",
            request.current_question_data_key,
            len(request.context.previous_conversation),
        )
        if not request.text.strip():
            return None
        return {request.current_question_data_key: request.text}

    async def rephrase_question(self, question: str, context: DialogueContext) -> str:
        return question

    async def combine_success_with_question(
        self, success: str, question: str, context: DialogueContext
    ) -> str:
        return f"{success}\n\n{question}"

    async def combine_fail_with_question(
        self, fail: str, question: str, context: DialogueContext
    ) -> str:
        return f"{fail}\n\n{question}"

    async def rephrase_completion(self, text: str, context: DialogueContext) -> str:
        return text
