"""LLMLanguage — language collaborator backed by an OpenAI-compatible API.

Every operation is one ``POST {base_url}/chat/completions`` call with a
system message (rendered by :class:`PromptManager` in the survey language)
and a user message carrying the conversation history, the current data
state, and the text to transform.

Failure handling:
  - transport errors and timeouts raise ``CollaboratorUnavailableError``
  - an unusable reply to ``extract_data`` returns None (failed extraction)
  - an empty reply to a text transform falls back to the unmodified input
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from survey_engine.exceptions import CollaboratorUnavailableError
from survey_engine.interfaces import LanguageCollaborator
from survey_engine.language.parsing import parse_extraction
from survey_engine.models.language import DialogueContext, ExtractionRequest
from survey_engine.prompt import PromptManager

logger = logging.getLogger(__name__)


class LLMLanguage(LanguageCollaborator):
    """Chat-completions client implementing :class:`LanguageCollaborator`.

    Args:
        base_url: API root, e.g. ``https://api.openai.com/v1``
        api_key: bearer token (optional for local servers)
        model: model name sent with every request
        timeout: per-request timeout in seconds
        temperature: sampling temperature for all calls
        max_tokens: completion budget for all calls
        prompts: optional :class:`PromptManager` override
        client: optional preconfigured ``httpx.AsyncClient`` (tests inject
            one with a mock transport)
    """

    def __init__(
        self,
        *,
        base_url: str,
        model: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        temperature: float = 0.3,
        max_tokens: int = 500,
        prompts: PromptManager | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._prompts = prompts or PromptManager()
        if client is None:
            headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
            client = httpx.AsyncClient(
                base_url=base_url.rstrip("/"),
                headers=headers,
                timeout=timeout,
            )
        self._client = client

    async def aclose(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # LanguageCollaborator
    # ------------------------------------------------------------------

    async def extract_data(self, request: ExtractionRequest) -> dict[str, Any] | None:
        instructions = self._prompts.extraction_instructions(request)
        user_input = self._prompts.user_input(
            request.context, [("text", request.text)],
        )
        raw = await self._complete(instructions, user_input)
        if not raw:
            return None
        data = parse_extraction(raw)
        logger.info(
            "Extracted keys=%s for current key=%s",
            sorted(data) if data is not None else None,
            request.current_question_data_key,
        )
        return data

    async def rephrase_question(self, question: str, context: DialogueContext) -> str:
        instructions = self._prompts.instructions(
            "rephrase_question",
            context.lang,
            has_data_state=context.has_data_state,
            has_conversation=context.has_conversation,
        )
        return await self._transform(
            instructions, context, [("question", question)], fallback=question,
        )

    async def combine_success_with_question(
        self, success: str, question: str, context: DialogueContext
    ) -> str:
        instructions = self._prompts.instructions("combine_success", context.lang)
        return await self._transform(
            instructions,
            context,
            [("success", success), ("question", question)],
            fallback=f"{success}\n\n{question}",
        )

    async def combine_fail_with_question(
        self, fail: str, question: str, context: DialogueContext
    ) -> str:
        instructions = self._prompts.instructions("combine_fail", context.lang)
        return await self._transform(
            instructions,
            context,
            [("fail", fail), ("question", question)],
            fallback=f"{fail}\n\n{question}",
        )

    async def rephrase_completion(self, text: str, context: DialogueContext) -> str:
        instructions = self._prompts.instructions("rephrase_completion", context.lang)
        return await self._transform(
            instructions, context, [("completion", text)], fallback=text,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _transform(
        self,
        instructions: str,
        context: DialogueContext,
        sections: list[tuple[str, str]],
        *,
        fallback: str,
    ) -> str:
        user_input = self._prompts.user_input(context, sections)
        result = await self._complete(instructions, user_input)
        return result or fallback

    async def _complete(self, instructions: str, user_input: str) -> str:
        """Run one chat completion and return the stripped reply text."""
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": instructions},
                {"role": "user", "content": user_input},
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
        try:
            response = await self._client.post("/chat/completions", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Language service request failed: %s", exc)
            raise CollaboratorUnavailableError(
                f"Language service request failed: {exc}"
            ) from exc

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.warning("Malformed completion envelope: %.200s", response.text)
            return ""
        return (content or "").strip()
