# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Documentation drafter backed by an OpenAI-compatible endpoint."""

from typing import Any

from openai import OpenAI, OpenAIError

from docdrift.llm.base import RemoteDrafter, read_field

OPENAI_DEFAULT_MODEL: str = "gpt-4.1-mini"
OPENAI_ALIASES: frozenset[str] = frozenset({"openai", "openai.com", "api.openai.com"})


def resolve_base_url(provider_url: str) -> str | None:
    """Map a provider URL onto the client base URL.

    Args:
        provider_url: ``openai`` (or the public host) for the hosted API, or the
            base URL of a compatible server such as ``localhost:1234/v1``.

    Returns:
        Base URL, or ``None`` to let the SDK pick the hosted API.

    Raises:
        ValueError: If the value is empty.
    """
    value = provider_url.strip().rstrip("/")
    if not value:
        raise ValueError("Invalid OpenAI provider URL: value is empty.")
    host = value.split("://", 1)[-1].split("/", 1)[0].lower()
    if value.lower() in OPENAI_ALIASES or host in OPENAI_ALIASES:
        return None
    if "://" not in value:
        value = f"http://{value}"
    return value


class OpenAIDrafter(RemoteDrafter):
    """Draft documentation with the chat completions API."""

    provider = "openai"
    request_errors = (OpenAIError, OSError, ValueError)

    def __init__(
        self, provider_url: str = "openai", model: str = OPENAI_DEFAULT_MODEL
    ) -> None:
        """Initialize client configuration.

        Raises:
            ValueError: If the provider URL is empty.
        """
        super().__init__(provider_url, model)
        self._base_url = resolve_base_url(provider_url)

    def _connect(self) -> OpenAI:
        return OpenAI(base_url=self._base_url)

    def _send(self, client: OpenAI, messages: list[dict[str, str]]) -> Any:
        return client.chat.completions.create(model=self._model, messages=messages)

    def _content(self, response: Any) -> Any:
        choices = read_field(response, "choices") or []
        if not choices:
            return None
        return read_field(read_field(choices[0], "message"), "content")
