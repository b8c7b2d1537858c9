"""PromptManager — Jinja2-based prompt renderer for the LLM collaborator.

Loads templates from the ``template/`` directory.  Each supported language
has its own sub-directory with the same file names:

    template/
      en/ extract_data.jinja2  rephrase_question.jinja2  ...  input.jinja2
      ru/ ...

System instructions are rendered from the per-operation templates; the user
input (conversation history, data state, payload) from ``input.jinja2``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import jinja2

from survey_engine.constants import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from survey_engine.models.language import DialogueContext, ExtractionRequest

logger = logging.getLogger(__name__)

# --- Operation-to-template mapping ---
_OPERATION_TEMPLATES: dict[str, str] = {
    "extract_data": "extract_data.jinja2",
    "rephrase_question": "rephrase_question.jinja2",
    "rephrase_completion": "rephrase_completion.jinja2",
    "combine_success": "combine_success.jinja2",
    "combine_fail": "combine_fail.jinja2",
}


class PromptManager:
    """Renders system instructions and user input for each collaborator call.

    Args:
        template_dir: optional override for the template directory.
            Defaults to ``template/`` sibling of this module.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "template"
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )
        self._env.filters["tojson"] = lambda v: json.dumps(
            v, ensure_ascii=False, indent=2
        )

    # --- Public API ---

    def instructions(self, operation: str, lang: str, **context) -> str:
        """Render the system instructions for ``operation`` in ``lang``."""
        template_name = _OPERATION_TEMPLATES.get(operation)
        if template_name is None:
            raise ValueError(f"Unknown prompt operation: {operation}")
        return self.render(template_name, lang, **context).strip()

    def extraction_instructions(self, request: ExtractionRequest) -> str:
        return self.instructions(
            "extract_data",
            request.context.lang,
            current_key=request.current_question_data_key,
            current_type=request.current_question_type,
            fields=list(zip(request.all_data_keys, request.all_question_types)),
            has_data_state=request.context.has_data_state,
            has_conversation=request.context.has_conversation,
        )

    def user_input(
        self,
        context: DialogueContext,
        sections: list[tuple[str, str]],
    ) -> str:
        """Render the user input: history, data state, then labelled sections."""
        return self.render(
            "input.jinja2",
            context.lang,
            history=context.previous_conversation,
            data_state=context.current_data_state,
            sections=sections,
        ).strip()

    def render(self, template_name: str, lang: str, **context) -> str:
        """Render ``{lang}/{template_name}``, falling back to the default language."""
        if lang not in SUPPORTED_LANGUAGES:
            logger.warning(
                "Unsupported prompt language %r, using %r", lang, DEFAULT_LANGUAGE
            )
            lang = DEFAULT_LANGUAGE
        template = self._env.get_template(f"{lang}/{template_name}")
        return template.render(**context)
