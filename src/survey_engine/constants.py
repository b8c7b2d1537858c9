"""Survey engine constants shared across the SDK.

These values are referenced by the normalizer, the engines, and the language
collaborators.  Several can be overridden via environment variables so that
deployments can extend the recognised vocabulary without code changes.
"""

import os


def _csv_env(name: str, default: str) -> frozenset[str]:
    """Read a comma-separated env var into a lowercase frozenset."""
    raw = os.getenv(name, default)
    return frozenset(t.strip().lower() for t in raw.split(",") if t.strip())


# Exact answers that mean "nothing to report" but still count as a deliberate
# answer.  Compared case-insensitively against the whole stripped value.
# Overridable via SURVEY_NONE_TOKENS.
NONE_TOKENS: frozenset[str] = _csv_env("SURVEY_NONE_TOKENS", "none,no,нет")

# Phrases matched as substrings (case-insensitive).
# Overridable via SURVEY_NONE_PHRASES.
NONE_PHRASES: frozenset[str] = _csv_env(
    "SURVEY_NONE_PHRASES",
    "no problems,нет проблем,no obstacles,нет препятствий",
)

# Completion message used when a survey has no final question.
DEFAULT_COMPLETION_MESSAGE = os.getenv(
    "SURVEY_DEFAULT_COMPLETION_MESSAGE", "Thank you for completing the survey!"
)

# Message returned by start_session for a survey without questions.
NO_QUESTIONS_MESSAGE = "No questions available"

# Languages with a prompt template set under prompt/template/.
SUPPORTED_LANGUAGES: tuple[str, ...] = ("en", "ru")
DEFAULT_LANGUAGE = "en"

# Data record types stored in the report document.
FREEFORM = "freeform"
EXTRACTED = "extracted"
