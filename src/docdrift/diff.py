# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Positional line diff for human review of documentation changes."""

import Levenshtein


def generate_diff(old_content: str, new_content: str) -> str:
    """Build a line-aligned diff between two texts.

    Lines are compared by index, not aligned by a longest-common-subsequence
    search, so an inserted or deleted line shows every following line as
    changed. Unchanged lines are prefixed with two spaces, removed lines with
    ``- `` and added lines with ``+ ``.

    Args:
        old_content: Original text.
        new_content: Replacement text.

    Returns:
        Diff text, one newline-terminated entry per emitted line.
    """
    old_lines = old_content.split("\n")
    new_lines = new_content.split("\n")
    entries: list[str] = []
    for index in range(max(len(old_lines), len(new_lines))):
        old_line = old_lines[index] if index < len(old_lines) else None
        new_line = new_lines[index] if index < len(new_lines) else None
        if old_line == new_line:
            entries.append(f"  {old_line}\n")
            continue
        if old_line is not None:
            entries.append(f"- {old_line}\n")
        if new_line is not None:
            entries.append(f"+ {new_line}\n")
    return "".join(entries)


def similarity_ratio(old_content: str, new_content: str) -> float:
    """Return the normalized Levenshtein similarity of two texts in [0, 1]."""
    return float(Levenshtein.ratio(old_content, new_content))
