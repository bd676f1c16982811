# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Documentation drafter backed by a local Ollama server."""

from typing import Any

import ollama

from docdrift.llm.base import RemoteDrafter, read_field


class OllamaDrafter(RemoteDrafter):
    """Draft documentation with the Ollama chat API."""

    provider = "ollama"
    request_errors = (ollama.RequestError, ollama.ResponseError, OSError, ValueError)

    def _connect(self) -> ollama.Client:
        return ollama.Client(host=self._provider_url)

    def _send(self, client: ollama.Client, messages: list[dict[str, str]]) -> Any:
        return client.chat(model=self._model, messages=messages, stream=False)

    def _content(self, response: Any) -> Any:
        return read_field(read_field(response, "message"), "content")
