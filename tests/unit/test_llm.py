from types import SimpleNamespace

import pytest

from docdrift.llm import OllamaDrafter, OpenAIDrafter
from docdrift.llm.base import SYSTEM_PROMPT, clean_draft
from docdrift.llm.openai_client import resolve_base_url
from docdrift.llm_client import DraftGenerationError, build_prompt_input


class _FakeOllamaClient:
    def __init__(self, response: object) -> None:
        self._response = response
        self.calls: list[dict] = []

    def chat(self, **kwargs):
        self.calls.append(kwargs)
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


class _FakeCompletions:
    def __init__(self, response: object) -> None:
        self._response = response
        self.calls: list[dict] = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        return self._response


def _ollama_with(response: object, monkeypatch) -> tuple[OllamaDrafter, _FakeOllamaClient]:
    fake = _FakeOllamaClient(response)
    monkeypatch.setattr("docdrift.llm.ollama_client.ollama.Client", lambda host: fake)
    return OllamaDrafter(provider_url="http://localhost:11434", model="llama3.1"), fake


def test_llm_001_prompt_input_appends_non_blank_context() -> None:
    assert build_prompt_input("Write docs", []) == "Write docs"
    assert build_prompt_input("Write docs", ["a", "  ", "b"]) == (
        "Write docs\n\nContext:\na\n\nb"
    )


def test_llm_002_ollama_drafter_sends_chat_messages(monkeypatch) -> None:
    drafter, fake = _ollama_with({"message": {"content": "  # Guide\n"}}, monkeypatch)

    content = drafter.draft("Guide", ["ctx"])

    assert content == "# Guide"
    assert fake.calls[0]["model"] == "llama3.1"
    assert fake.calls[0]["stream"] is False
    assert fake.calls[0]["messages"] == [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": "Guide\n\nContext:\nctx"},
    ]


def test_llm_003_ollama_drafter_rejects_empty_response(monkeypatch) -> None:
    drafter, _ = _ollama_with({"message": {"content": "   "}}, monkeypatch)

    with pytest.raises(DraftGenerationError):
        drafter.draft("Guide", [])


def test_llm_004_ollama_drafter_wraps_transport_errors(monkeypatch) -> None:
    drafter, _ = _ollama_with(ConnectionError("refused"), monkeypatch)

    with pytest.raises(DraftGenerationError, match="refused"):
        drafter.draft("Guide", [])


def test_llm_005_openai_base_url_resolution() -> None:
    assert resolve_base_url("openai") is None
    assert resolve_base_url("https://api.openai.com/v1/") is None
    assert resolve_base_url("localhost:1234/v1/") == "http://localhost:1234/v1"
    assert resolve_base_url("https://llm.internal/v1") == "https://llm.internal/v1"
    with pytest.raises(ValueError):
        resolve_base_url("   ")
    with pytest.raises(ValueError):
        OpenAIDrafter(provider_url="")


def test_llm_006_openai_drafter_reads_first_choice(monkeypatch) -> None:
    completions = _FakeCompletions(
        SimpleNamespace(
            choices=[
                SimpleNamespace(
                    message=SimpleNamespace(content="```markdown\n# API\n\nRoutes.\n```")
                )
            ]
        )
    )
    created: list[str | None] = []

    def _client(base_url):
        created.append(base_url)
        return SimpleNamespace(chat=SimpleNamespace(completions=completions))

    monkeypatch.setattr("docdrift.llm.openai_client.OpenAI", _client)
    drafter = OpenAIDrafter(provider_url="localhost:1234/v1", model="local-model")

    assert drafter.draft("API", []) == "# API\n\nRoutes."
    assert drafter.draft("API", []) == "# API\n\nRoutes."
    assert created == ["http://localhost:1234/v1"]
    assert completions.calls[0]["model"] == "local-model"


def test_llm_007_openai_drafter_rejects_missing_choices(monkeypatch) -> None:
    completions = _FakeCompletions(SimpleNamespace(choices=[]))
    monkeypatch.setattr(
        "docdrift.llm.openai_client.OpenAI",
        lambda base_url: SimpleNamespace(chat=SimpleNamespace(completions=completions)),
    )

    with pytest.raises(DraftGenerationError, match="openai"):
        OpenAIDrafter().draft("API", [])


def test_llm_008_clean_draft_removes_only_a_wrapping_fence() -> None:
    assert clean_draft("```\n# Title\n```") == "# Title"
    assert clean_draft("  # Title\n\n```py\nx = 1\n```\n") == (
        "# Title\n\n```py\nx = 1\n```"
    )
