"""QuestionProgressionEngine tests — next-question choice, completion, state.

Uses PassthroughLanguage, so rendered messages are the raw templates
(combined messages are joined by a blank line).
"""

import pytest

from survey_engine.constants import DEFAULT_COMPLETION_MESSAGE
from survey_engine.language.passthrough import PassthroughLanguage
from survey_engine.models.report import Report
from survey_engine.models.session import SessionState
from survey_engine.progression import Decision, QuestionProgressionEngine
from survey_engine.report import append_extracted, is_answered, upsert_freeform


@pytest.fixture
def progression():
    return QuestionProgressionEngine(PassthroughLanguage())


# =====================================================================
# Pure decisions
# =====================================================================


class TestNextUnanswered:

    def test_first_question_on_empty_report(self, progression, scrum_questions):
        q = progression.next_unanswered(Report(), scrum_questions)
        assert q.data_key == "yesterdayWork"

    def test_skips_questions_answered_ahead(self, progression, scrum_questions):
        """An extracted value for todayPlan makes it answered already."""
        report = Report()
        upsert_freeform(report, "yesterdayWork", "KCD-12")
        append_extracted(report, "todayPlan", "KCD-13")
        q = progression.next_unanswered(report, scrum_questions)
        assert q.data_key == "roadblocks"

    def test_order_not_list_position(self, progression, scrum_questions):
        shuffled = list(reversed(scrum_questions))
        q = progression.next_unanswered(Report(), shuffled)
        assert q.order == 1


class TestCompletion:

    def test_all_answered_is_complete(self, progression, scrum_questions):
        report = Report()
        for q in scrum_questions:
            upsert_freeform(report, q.data_key, "x")
        assert progression.is_complete(report, scrum_questions)

    def test_final_answered_completes_early(self, progression, scrum_questions):
        """Answering the final question ends the survey even with gaps."""
        report = Report()
        append_extracted(report, "roadblocks", "none")
        assert progression.is_complete(report, scrum_questions)

    def test_open_survey_is_not_complete(self, progression, scrum_questions):
        report = Report()
        upsert_freeform(report, "yesterdayWork", "KCD-12")
        assert not progression.is_complete(report, scrum_questions)


# =====================================================================
# Message rendering
# =====================================================================


class TestDecideNext:

    @pytest.mark.asyncio
    async def test_opening_question_is_only_rephrased(self, progression, scrum_questions):
        decision = await progression.decide_next(Report(), scrum_questions)
        assert not decision.completed
        assert decision.next_question.id == 1
        assert decision.message == "What did you work on yesterday?"

    @pytest.mark.asyncio
    async def test_next_question_is_prefixed_with_success(self, progression, scrum_questions):
        report = Report()
        upsert_freeform(report, "yesterdayWork", "KCD-12")
        decision = await progression.decide_next(
            report, scrum_questions, answered=scrum_questions[0],
        )
        assert decision.next_question.data_key == "todayPlan"
        assert decision.message == (
            "Thanks, got it.\n\nWhat are you planning to work on today?"
        )

    @pytest.mark.asyncio
    async def test_never_returns_answered_question(self, progression, scrum_questions):
        report = Report()
        upsert_freeform(report, "yesterdayWork", "KCD-12")
        append_extracted(report, "todayPlan", "KCD-13")
        decision = await progression.decide_next(report, scrum_questions)
        assert not is_answered(report, decision.next_question.data_key)

    @pytest.mark.asyncio
    async def test_completion_uses_final_success_template(self, progression, scrum_questions):
        report = Report()
        for q in scrum_questions:
            upsert_freeform(report, q.data_key, "x")
        decision = await progression.decide_next(report, scrum_questions)
        assert decision.completed
        assert decision.next_question is None
        assert decision.message == "Thank you! Have a productive day."

    @pytest.mark.asyncio
    async def test_completion_is_stable(self, progression, scrum_questions):
        report = Report()
        append_extracted(report, "roadblocks", "none")
        first = await progression.decide_next(report, scrum_questions)
        second = await progression.decide_next(report, scrum_questions)
        assert first.completed and second.completed

    @pytest.mark.asyncio
    async def test_completion_without_final_question(self, progression, scrum_questions):
        questions = [q.model_copy(update={"final": False}) for q in scrum_questions]
        report = Report()
        for q in questions:
            upsert_freeform(report, q.data_key, "x")
        decision = await progression.decide_next(report, questions)
        assert decision.completed
        assert decision.message == DEFAULT_COMPLETION_MESSAGE

    @pytest.mark.asyncio
    async def test_fail_message(self, progression, scrum_questions):
        message = await progression.fail_message(scrum_questions[1], Report())
        assert message == (
            "Sorry, I couldn't figure out your plan for today."
            "\n\nWhat are you planning to work on today?"
        )


# =====================================================================
# State application
# =====================================================================


class TestRecord:

    def test_record_appends_agent_entry_and_advances(self, progression, scrum_questions):
        decision = Decision(next_question=scrum_questions[1], message="Plan?", completed=False)
        report, state = progression.record(Report(), SessionState(current_order=1), decision)

        entry = report.conversation[-1]
        assert entry.author == "agent"
        assert entry.text == "Plan?"
        assert entry.question_id == 2
        assert state.current_order == 2
        assert state.current_question_id == 2
        assert not state.completed

    def test_current_order_never_decreases(self, progression, scrum_questions):
        """Re-asking an earlier skipped question keeps the high-water mark."""
        decision = Decision(next_question=scrum_questions[0], message="Q1?", completed=False)
        _, state = progression.record(Report(), SessionState(current_order=3), decision)
        assert state.current_order == 3
        assert state.current_question_id == 1

    def test_completion_sets_flag_and_clears_question(self, progression):
        decision = Decision(next_question=None, message="Bye", completed=True)
        report, state = progression.record(
            Report(), SessionState(current_order=3, current_question_id=3), decision,
        )
        assert state.completed
        assert state.current_question_id is None
        assert state.current_order == 3
        assert report.conversation[-1].question_id is None

    def test_inputs_are_not_modified(self, progression, scrum_questions):
        original = Report()
        state = SessionState()
        decision = Decision(next_question=scrum_questions[0], message="Q1?", completed=False)
        progression.record(original, state, decision)
        assert original.conversation == []
        assert state.current_question_id is None
