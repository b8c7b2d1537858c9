from unittest.mock import AsyncMock

import pytest

from survey_engine.catalog import SurveyStore
from survey_engine.models.survey import QuestionTemplate


@pytest.fixture(scope="session")
def store():
    """Load the demo surveys from surveys/ once for the entire test session."""
    s = SurveyStore()
    s.load()
    return s


@pytest.fixture
def scrum_questions(store) -> list[QuestionTemplate]:
    """yesterdayWork → todayPlan → roadblocks (final)."""
    return store.get_survey("demo-scrum-daily-en").ordered_questions


@pytest.fixture
def mock_db():
    """AsyncMock standing in for AsyncSession — flush/commit are no-ops."""
    return AsyncMock()
