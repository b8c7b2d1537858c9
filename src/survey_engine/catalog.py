"""SurveyStore — loads survey definitions from ``surveys/*.yaml``.

This is the survey lookup collaborator at runtime.  The store is loaded once
at startup and resolves surveys by ``external_id``.

Usage::

    store = SurveyStore()           # defaults to surveys/ relative to repo root
    store.load()                    # parse all YAML files

    survey = store.get_survey("demo-scrum-daily-en")
    first = survey.ordered_questions[0]

File format (one survey per file)::

    external_id: demo-scrum-daily-en
    name: Scrum daily
    lang: en
    questions:
      - id: 1
        order: 1
        data_key: yesterdayWork
        question_template: What did you work on yesterday?
        success_template: Thanks!
        fail_template: Sorry, I didn't catch that.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from survey_engine.models.survey import Survey

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def find_repo_root(start: Optional[Path] = None) -> Path:
    """Walk upwards from *start* to find the repo root (dir with pyproject.toml or .git).

    Falls back to cwd if no marker is found.
    """
    p = (start or Path(__file__).resolve()).parent
    for parent in [p, *p.parents]:
        if (parent / "pyproject.toml").exists() or (parent / ".git").exists():
            return parent
    return Path.cwd()


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


# ---------------------------------------------------------------------------
# SurveyStore
# ---------------------------------------------------------------------------

class SurveyStore:
    """Loads every ``*.yaml`` survey definition and provides lookup by external id.

    Attributes populated after :meth:`load`:

        surveys — dict[external_id, Survey]
    """

    def __init__(self, survey_dir: str | Path | None = None) -> None:
        if survey_dir is None:
            survey_dir = find_repo_root() / "surveys"
        self._base = Path(survey_dir)
        self.surveys: dict[str, Survey] = {}

    def load(self) -> None:
        """Parse all survey YAML files.

        Raises ``FileNotFoundError`` if the directory is missing and
        ``ValueError`` for invalid or duplicate definitions.
        """
        if not self._base.is_dir():
            raise FileNotFoundError(f"Missing survey directory: {self._base}")

        for path in sorted(self._base.glob("*.yaml")):
            raw = load_yaml(path)
            try:
                survey = Survey.model_validate(raw)
            except ValidationError as exc:
                raise ValueError(f"Invalid survey definition in {path}: {exc}") from exc
            self.add(survey)

        logger.info("SurveyStore loaded: %d surveys from %s", len(self.surveys), self._base)

    def add(self, survey: Survey) -> None:
        """Register a survey (used by load() and by tests)."""
        if survey.external_id in self.surveys:
            raise ValueError(f"Survey already exists: {survey.external_id}")
        self.surveys[survey.external_id] = survey

    def get_survey(self, external_id: str) -> Survey:
        """Return the survey for ``external_id``.

        Raises ``ValueError`` (mapped to 404) when unknown.
        """
        survey = self.surveys.get(external_id)
        if survey is None:
            raise ValueError(f"Survey not found: external_id={external_id}")
        return survey
