# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Shared chat request flow for remote documentation providers."""

import logging
from typing import Any

from docdrift.llm_client import DraftGenerationError, build_prompt_input

logger = logging.getLogger(__name__)

SYSTEM_PROMPT: str = (
    "You write concise, accurate project documentation in Markdown. "
    "Use only the provided context and do not invent APIs. "
    "Reply with the document body only."
)


def build_messages(prompt: str, context: list[str]) -> list[dict[str, str]]:
    """Build the system and user chat messages for one document."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": build_prompt_input(prompt, context)},
    ]


def clean_draft(text: str) -> str:
    """Strip whitespace and a fence wrapping the whole draft.

    Models often answer with the document inside a ```markdown block; the
    fence is removed so the file holds plain Markdown.
    """
    draft = text.strip()
    if not draft.startswith("```"):
        return draft
    lines = draft.split("\n")[1:]
    if lines and lines[-1].strip() == "```":
        lines = lines[:-1]
    return "\n".join(lines).strip()


def read_field(source: Any, name: str) -> Any:
    """Read ``name`` from a mapping or an SDK response object."""
    if source is None:
        return None
    if isinstance(source, dict):
        return source.get(name)
    return getattr(source, name, None)


class RemoteDrafter:
    """Draft documents through a provider chat endpoint.

    Subclasses connect the SDK client, send the chat messages and pull the
    reply text out of the response. Failures listed in ``request_errors``
    surface as ``DraftGenerationError``.
    """

    provider: str = "remote"
    request_errors: tuple[type[Exception], ...] = (OSError, ValueError)

    def __init__(self, provider_url: str, model: str) -> None:
        """Initialize client configuration.

        Args:
            provider_url: Provider endpoint URL.
            model: Model identifier used for drafting.
        """
        self._provider_url = provider_url
        self._model = model
        self._client: Any = None

    def draft(self, prompt: str, context: list[str]) -> str:
        """Draft one document.

        Args:
            prompt: Document instruction.
            context: Context chunks appended to the prompt.

        Returns:
            Markdown text without a wrapping code fence.

        Raises:
            DraftGenerationError: If the request fails or the reply is empty.
        """
        messages = build_messages(prompt, context)
        try:
            if self._client is None:
                self._client = self._connect()
            response = self._send(self._client, messages)
        except self.request_errors as exc:
            logger.warning(
                f"Draft request failed (provider={self.provider} "
                f"provider_url={self._provider_url} model={self._model} error={exc})"
            )
            raise DraftGenerationError(str(exc)) from exc

        content = self._content(response)
        draft = clean_draft(content) if isinstance(content, str) else ""
        if not draft:
            logger.warning(
                f"Draft response was empty (provider={self.provider} "
                f"model={self._model} response={response!r})"
            )
            raise DraftGenerationError(
                f"{self.provider} response does not contain documentation content."
            )
        logger.debug(
            f"Draft received (provider={self.provider} model={self._model} chars={len(draft)})"
        )
        return draft

    def _connect(self) -> Any:
        raise NotImplementedError

    def _send(self, client: Any, messages: list[dict[str, str]]) -> Any:
        raise NotImplementedError

    def _content(self, response: Any) -> Any:
        raise NotImplementedError
