"""PromptManager tests — verify prompt rendering for every collaborator call.

Tests build DialogueContext / ExtractionRequest objects directly and check
that the rendered prompts contain the expected elements: data keys, history,
data state, and the labelled payload sections.
"""

import pytest

from survey_engine.models.language import DialogueContext, ExtractionRequest
from survey_engine.models.report import QAPair
from survey_engine.prompt import PromptManager


# =====================================================================
# Fixtures
# =====================================================================


@pytest.fixture
def pm():
    """Fresh PromptManager for each test."""
    return PromptManager()


@pytest.fixture
def context():
    return DialogueContext(
        lang="en",
        current_data_state={"yesterdayWork": "KCD-12"},
        previous_conversation=[
            QAPair(question="What did you work on yesterday?", answer="KCD-12"),
        ],
    )


# =====================================================================
# System instructions
# =====================================================================


class TestInstructions:

    def test_extraction_lists_every_key(self, pm):
        request = ExtractionRequest(
            text="KCD-13",
            current_question_data_key="todayPlan",
            all_data_keys=["yesterdayWork", "todayPlan", "email"],
            all_question_types=["freeform", "freeform", "email"],
        )
        text = pm.extraction_instructions(request)

        assert 'key "todayPlan" (type: freeform)' in text
        for key in ("yesterdayWork", "todayPlan", "email"):
            assert f'- "{key}"' in text, f"Data key {key} missing from extraction prompt"
        assert '"email" (type: email)' in text
        assert "Return only valid JSON" in text

    def test_extraction_mentions_collected_data_only_when_present(self, pm, context):
        base = dict(
            text="KCD-13",
            current_question_data_key="todayPlan",
            all_data_keys=["todayPlan"],
            all_question_types=["freeform"],
        )
        without = pm.extraction_instructions(ExtractionRequest(**base))
        with_state = pm.extraction_instructions(ExtractionRequest(**base, context=context))
        assert "data already collected" not in without
        assert "data already collected" in with_state

    def test_rephrase_question_flags(self, pm):
        plain = pm.instructions("rephrase_question", "en")
        rich = pm.instructions(
            "rephrase_question", "en", has_data_state=True, has_conversation=True,
        )
        assert "current state of collected data" not in plain
        assert "current state of collected data" in rich
        assert "previous conversation" in rich

    def test_russian_templates(self, pm):
        text = pm.instructions("rephrase_question", "ru")
        assert "перефразирует" in text

    def test_unsupported_language_falls_back_to_english(self, pm):
        assert pm.instructions("rephrase_completion", "de") == pm.instructions(
            "rephrase_completion", "en",
        )

    def test_unknown_operation_raises(self, pm):
        with pytest.raises(ValueError, match="Unknown prompt operation"):
            pm.instructions("summarise", "en")

    @pytest.mark.parametrize(
        "operation",
        ["extract_data", "rephrase_question", "rephrase_completion",
         "combine_success", "combine_fail"],
    )
    @pytest.mark.parametrize("lang", ["en", "ru"])
    def test_every_template_renders(self, pm, operation, lang):
        text = pm.instructions(
            operation, lang,
            current_key="k", current_type="freeform", fields=[("k", "freeform")],
        )
        assert text.strip(), f"{lang}/{operation} rendered empty"


# =====================================================================
# User input
# =====================================================================


class TestUserInput:

    def test_history_state_and_sections(self, pm, context):
        text = pm.user_input(
            context, [("success", "Thanks, got it."), ("question", "Plans for today?")],
        )
        assert "Previous conversation:" in text
        assert "Q: What did you work on yesterday?" in text
        assert "A: KCD-12" in text
        assert '"yesterdayWork": "KCD-12"' in text
        assert "Success message: Thanks, got it." in text
        assert "Question to rephrase: Plans for today?" in text
        # Sections keep their order
        assert text.index("Success message") < text.index("Question to rephrase")

    def test_empty_context_renders_sections_only(self, pm):
        text = pm.user_input(DialogueContext(), [("text", "KCD-12")])
        assert text == "User response: KCD-12"

    def test_russian_labels(self, pm):
        text = pm.user_input(DialogueContext(lang="ru"), [("text", "нет")])
        assert text == "Ответ пользователя: нет"

    def test_non_ascii_data_state_is_not_escaped(self, pm):
        context = DialogueContext(lang="ru", current_data_state={"roadblocks": "нет"})
        text = pm.user_input(context, [])
        assert '"roadblocks": "нет"' in text
