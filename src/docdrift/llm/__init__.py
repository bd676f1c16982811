# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Documentation drafting clients."""

from docdrift.llm.ollama_client import OllamaDrafter
from docdrift.llm.openai_client import OPENAI_DEFAULT_MODEL, OpenAIDrafter
from docdrift.llm.stub import StubDrafter

__all__ = ["OllamaDrafter", "OpenAIDrafter", "OPENAI_DEFAULT_MODEL", "StubDrafter"]
