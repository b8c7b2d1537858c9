"""Prompt rendering for the LLM collaborator.

Provides ``PromptManager``, a Jinja2-based template engine that renders
per-language system instructions and user input for every collaborator call.
"""

from survey_engine.prompt.manager import PromptManager

__all__ = ["PromptManager"]
