"""Language collaborator implementations.

    PassthroughLanguage — no model; returns inputs unchanged
    LLMLanguage         — OpenAI-compatible chat-completions backend

``build_language_collaborator`` picks one from a backend name.
"""

from __future__ import annotations

from survey_engine.interfaces import LanguageCollaborator
from survey_engine.language.llm import LLMLanguage
from survey_engine.language.passthrough import PassthroughLanguage

BACKENDS = ("passthrough", "openai")


def build_language_collaborator(
    backend: str,
    *,
    base_url: str | None = None,
    api_key: str | None = None,
    model: str | None = None,
    timeout: float = 30.0,
    temperature: float = 0.3,
) -> LanguageCollaborator:
    """Return the collaborator for ``backend`` (``passthrough`` or ``openai``)."""
    if backend == "passthrough":
        return PassthroughLanguage()
    if backend == "openai":
        if not base_url or not model:
            raise ValueError(
                "The openai language backend requires a base URL and a model"
            )
        return LLMLanguage(
            base_url=base_url,
            api_key=api_key,
            model=model,
            timeout=timeout,
            temperature=temperature,
        )
    raise ValueError(f"Unknown language backend: {backend!r} (expected one of {BACKENDS})")


__all__ = [
    "BACKENDS",
    "LLMLanguage",
    "PassthroughLanguage",
    "build_language_collaborator",
]
