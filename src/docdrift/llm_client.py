# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Documentation drafting client abstractions."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class DraftGenerationError(RuntimeError):
    """Represent a documentation drafting failure."""


class DocumentationDrafter(Protocol):
    """Define text generation behavior for a documentation provider."""

    def draft(self, prompt: str, context: list[str]) -> str:
        """Generate documentation text.

        Args:
            prompt: Free-text instruction describing the document.
            context: Optional context chunks (signatures, summaries).

        Returns:
            Generated markdown text.

        Raises:
            DraftGenerationError: If generation fails or response is malformed.
        """


def build_prompt_input(prompt: str, context: list[str]) -> str:
    """Join a prompt and its context chunks into one request body."""
    if not context:
        return prompt
    joined = "\n\n".join(chunk for chunk in context if chunk.strip())
    return f"{prompt}\n\nContext:\n{joined}"
