"""Input models for the language collaborator."""

from pydantic import BaseModel, Field

from survey_engine.models.report import QAPair


class DialogueContext(BaseModel):
    """Context handed to every text-transform call.

    ``current_data_state`` is the flattened report; ``previous_conversation``
    the reconstructed Q/A history.  Both are empty at session start.
    """

    lang: str = "en"
    current_data_state: dict[str, str] = Field(default_factory=dict)
    previous_conversation: list[QAPair] = Field(default_factory=list)

    @property
    def has_data_state(self) -> bool:
        return bool(self.current_data_state)

    @property
    def has_conversation(self) -> bool:
        return bool(self.previous_conversation)


class ExtractionRequest(BaseModel):
    """Everything the collaborator needs to extract data from one message."""

    text: str
    current_question_data_key: str
    current_question_type: str = "freeform"
    all_data_keys: list[str]
    all_question_types: list[str]
    context: DialogueContext = Field(default_factory=DialogueContext)
