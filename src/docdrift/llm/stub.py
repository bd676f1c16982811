# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Offline drafter returning canned documentation text."""

import logging

logger = logging.getLogger(__name__)


class StubDrafter:
    """Produce a draft skeleton without calling any provider."""

    def draft(self, prompt: str, context: list[str]) -> str:
        """Echo the prompt into a minimal markdown draft.

        Args:
            prompt: Document instruction; its first line becomes the heading.
            context: Context chunks listed under a reference section.

        Returns:
            Markdown draft text.
        """
        lines = prompt.strip().splitlines() or ["Documentation"]
        heading = lines[0].strip()
        body = [f"# {heading}", ""]
        body.extend(line.strip() for line in lines[1:] if line.strip())
        if context:
            body.extend(["", "## Reference", ""])
            body.extend(f"- {chunk.strip()}" for chunk in context if chunk.strip())
        body.extend(["", "_Draft documentation generated by docdrift._", ""])
        return "\n".join(body)
