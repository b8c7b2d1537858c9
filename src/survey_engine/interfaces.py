"""Abstract interface for the language collaborator.

The orchestrator never generates or understands text itself.  It prepares
inputs and interprets structured outputs of a ``LanguageCollaborator``:

    collaborator: LanguageCollaborator = LLMLanguage(...)
    data = await collaborator.extract_data(request)
    # {"todayPlan": "KCD-13", "roadblocks": None} or None on failure

    text = await collaborator.rephrase_question(template, context)
    text = await collaborator.combine_success_with_question(ok, text, context)

Implementations live in :mod:`survey_engine.language`.  A pass-through
implementation is provided for tests and for deployments without a model.
"""

from abc import ABC, abstractmethod
from typing import Any

from survey_engine.models.language import DialogueContext, ExtractionRequest


class LanguageCollaborator(ABC):
    """Extraction plus four narrow text transforms."""

    @abstractmethod
    async def extract_data(self, request: ExtractionRequest) -> dict[str, Any] | None:
        """Extract values for any survey data keys from the client message.

        Returns
        -------
        dict | None
            Mapping of data key to value (``None`` for keys with nothing
            usable), or ``None`` when extraction failed entirely, including
            unparsable model output.

        Raises
        ------
        CollaboratorUnavailableError
            When the underlying service cannot be reached.
        """
        ...

    @abstractmethod
    async def rephrase_question(self, question: str, context: DialogueContext) -> str:
        """Render a question template as a natural message."""
        ...

    @abstractmethod
    async def combine_success_with_question(
        self, success: str, question: str, context: DialogueContext
    ) -> str:
        """Join an acknowledgement and the next question into one message."""
        ...

    @abstractmethod
    async def combine_fail_with_question(
        self, fail: str, question: str, context: DialogueContext
    ) -> str:
        """Join a retry prompt and the repeated question into one message."""
        ...

    @abstractmethod
    async def rephrase_completion(self, text: str, context: DialogueContext) -> str:
        """Render the closing message of a completed survey."""
        ...
