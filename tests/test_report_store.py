"""Report Store tests — pure functions over the report document.

Covers the data-ledger rules:
  - at most one freeform entry per key (upsert keeps the id)
  - extracted entries accumulate, never deduplicated
  - flatten: freeform wins, otherwise the first-inserted extracted entry
  - history reconstruction pairs each agent message with the next reply
"""

from survey_engine.models.report import ConversationEntry, Report
from survey_engine.report import (
    append_conversation,
    append_extracted,
    build_history,
    find_freeform,
    flatten,
    is_answered,
    last_agent_question_id,
    to_stored_value,
    upsert_freeform,
)


def _agent(text, question_id=None):
    return ConversationEntry(id=f"a-{text}", author="agent", text=text, question_id=question_id)


def _client(text):
    return ConversationEntry(id=f"c-{text}", author="client", text=text)


# =====================================================================
# Mutators
# =====================================================================


class TestFreeformUpsert:

    def test_upsert_creates_single_entry(self):
        report = Report()
        entry = upsert_freeform(report, "todayPlan", "KCD-13")
        assert len(report.data) == 1
        assert entry.type == "freeform"
        assert entry.value == "KCD-13"

    def test_upsert_twice_keeps_one_entry_and_id(self):
        """A second freeform write replaces the value in place."""
        report = Report()
        first = upsert_freeform(report, "todayPlan", "KCD-13")
        second = upsert_freeform(report, "todayPlan", "KCD-14")

        freeform = [e for e in report.data if e.key == "todayPlan" and e.type == "freeform"]
        assert len(freeform) == 1, "Expected exactly one freeform entry per key"
        assert second.id == first.id, "Upsert should keep the original entry id"
        assert freeform[0].value == "KCD-14"

    def test_upsert_leaves_extracted_entries_alone(self):
        report = Report()
        append_extracted(report, "todayPlan", "KCD-13")
        upsert_freeform(report, "todayPlan", "KCD-14")
        types = [e.type for e in report.data]
        assert types == ["extracted", "freeform"]


class TestExtractedAccumulation:

    def test_extracted_entries_are_never_deduplicated(self):
        report = Report()
        a = append_extracted(report, "roadblocks", "none")
        b = append_extracted(report, "roadblocks", "none")
        assert len(report.data) == 2, "Identical extracted values must both be kept"
        assert a.id != b.id

    def test_non_string_values_are_stored_as_json(self):
        report = Report()
        entry = append_extracted(report, "tasks", ["KCD-1", "КЦД-2"])
        assert entry.value == '["KCD-1", "КЦД-2"]'

    def test_to_stored_value_keeps_strings_verbatim(self):
        assert to_stored_value("  spaced ") == "  spaced "
        assert to_stored_value(3) == "3"
        assert to_stored_value(True) == "true"


# =====================================================================
# Accessors
# =====================================================================


class TestFlatten:

    def test_freeform_wins_over_extracted(self):
        report = Report()
        append_extracted(report, "todayPlan", "guess")
        upsert_freeform(report, "todayPlan", "KCD-13")
        assert flatten(report) == {"todayPlan": "KCD-13"}

    def test_first_extracted_wins_without_freeform(self):
        """Without a freeform entry the earliest extracted value is kept."""
        report = Report()
        append_extracted(report, "todayPlan", "first")
        append_extracted(report, "todayPlan", "second")
        assert flatten(report)["todayPlan"] == "first"

    def test_flatten_has_one_value_per_key(self):
        report = Report()
        upsert_freeform(report, "yesterdayWork", "KCD-12")
        append_extracted(report, "todayPlan", "KCD-13")
        append_extracted(report, "todayPlan", "KCD-14")
        flat = flatten(report)
        assert set(flat) == {"yesterdayWork", "todayPlan"}

    def test_flatten_is_idempotent(self):
        report = Report()
        upsert_freeform(report, "yesterdayWork", "KCD-12")
        append_extracted(report, "roadblocks", "none")
        assert flatten(report) == flatten(report)

    def test_flatten_empty_report(self):
        assert flatten(Report()) == {}


class TestAnswered:

    def test_none_equivalent_counts_as_answered(self):
        report = Report()
        append_extracted(report, "roadblocks", "нет проблем")
        assert is_answered(report, "roadblocks")

    def test_blank_value_does_not_count(self):
        report = Report()
        append_extracted(report, "roadblocks", "   ")
        assert not is_answered(report, "roadblocks")

    def test_missing_key_is_unanswered(self):
        assert not is_answered(Report(), "roadblocks")

    def test_find_freeform_ignores_extracted(self):
        report = Report()
        append_extracted(report, "todayPlan", "KCD-13")
        assert find_freeform(report, "todayPlan") is None


class TestHistory:

    def test_pairs_agent_with_following_client(self):
        report = Report()
        append_conversation(report, _agent("Q1", 1))
        append_conversation(report, _client("A1"))
        append_conversation(report, _agent("Q2", 2))
        append_conversation(report, _client("A2"))

        history = build_history(report)
        assert [(p.question, p.answer) for p in history] == [("Q1", "A1"), ("Q2", "A2")]

    def test_unanswered_trailing_question_is_dropped(self):
        report = Report()
        append_conversation(report, _agent("Q1", 1))
        append_conversation(report, _client("A1"))
        append_conversation(report, _agent("Q2", 2))
        assert len(build_history(report)) == 1

    def test_client_without_question_is_skipped(self):
        report = Report()
        append_conversation(report, _client("hello?"))
        assert build_history(report) == []

    def test_last_agent_question_id(self):
        report = Report()
        assert last_agent_question_id(report) is None
        append_conversation(report, _agent("Q1", 1))
        append_conversation(report, _client("A1"))
        append_conversation(report, _agent("Q3", 3))
        append_conversation(report, _client("A3"))
        assert last_agent_question_id(report) == 3
