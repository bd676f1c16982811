# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Line-level construct detection.

Detection is a best-effort classifier, not a parser: each line is matched
against a finite ordered list of pattern rules and the first matching rule
wins. Results are advisory and may contain false positives (for example a
``class`` keyword inside a string literal).
"""

import logging
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable

from docdrift.model import CodeItem, CodeItemKind, Parameter, Priority

logger = logging.getLogger(__name__)

_JS_FAMILY: frozenset[str] = frozenset({"typescript", "javascript"})
_CLASS_LANGUAGES: frozenset[str] = frozenset(
    {
        "typescript",
        "javascript",
        "python",
        "java",
        "kotlin",
        "csharp",
        "php",
        "ruby",
        "swift",
    }
)
_HTTP_VERBS = "get|post|put|delete|patch"

_HIGH_PRIORITY_KEYWORDS: tuple[str, ...] = ("auth", "user", "main", "core")
_MEDIUM_PRIORITY_KEYWORDS: tuple[str, ...] = ("util", "helper", "service", "manager")

_DOC_MARKERS: dict[str, tuple[str, ...]] = {
    "rust": ("///", "//!"),
    "csharp": ("///",),
    "ruby": ("##",),
}
_DEFAULT_DOC_MARKERS: tuple[str, ...] = ("/**", "* @")
_PY_DOCSTRING_OPENER = re.compile(r"^[rRuU]?(?:\"{3}|'{3})")


def _verb_route(match: re.Match[str]) -> str:
    return f"{match.group(1).upper()} {match.group(2)}"


def _first_group(match: re.Match[str]) -> str:
    return match.group(1)


@dataclass(frozen=True)
class DetectionRule:
    """Map one line pattern to a construct kind for a set of languages."""

    kind: CodeItemKind
    languages: frozenset[str]
    pattern: re.Pattern[str]
    name_of: Callable[[re.Match[str]], str] = _first_group


@dataclass(frozen=True)
class DetectedConstruct:
    """Represent a construct matched on a single line."""

    kind: CodeItemKind
    name: str
    signature: str


DETECTION_RULES: tuple[DetectionRule, ...] = (
    DetectionRule(
        kind="api-route",
        languages=_JS_FAMILY,
        pattern=re.compile(
            rf"\b(?:app|router)\.({_HTTP_VERBS})\s*\(\s*['\"`]([^'\"`]+)['\"`]"
        ),
        name_of=_verb_route,
    ),
    DetectionRule(
        kind="api-route",
        languages=_JS_FAMILY,
        pattern=re.compile(rf"\.({_HTTP_VERBS})\s*\(\s*['\"`]([^'\"`]+)['\"`]"),
        name_of=_verb_route,
    ),
    DetectionRule(
        kind="api-route",
        languages=frozenset({"python"}),
        pattern=re.compile(rf"@\w+(?:\.\w+)*\.({_HTTP_VERBS})\(\s*['\"]([^'\"]+)['\"]"),
        name_of=_verb_route,
    ),
    DetectionRule(
        kind="api-route",
        languages=frozenset({"python"}),
        pattern=re.compile(r"@\w+(?:\.\w+)*\.route\(\s*['\"]([^'\"]+)['\"]"),
        name_of=lambda match: f"ROUTE {match.group(1)}",
    ),
    DetectionRule(
        kind="interface",
        languages=frozenset({"typescript", "java", "kotlin", "csharp", "php"}),
        pattern=re.compile(r"\binterface\s+(\w+)"),
    ),
    DetectionRule(
        kind="interface",
        languages=frozenset({"go"}),
        pattern=re.compile(r"\btype\s+(\w+)\s+interface\b"),
    ),
    DetectionRule(
        kind="class",
        languages=_CLASS_LANGUAGES,
        pattern=re.compile(r"\bclass\s+(\w+)"),
    ),
    DetectionRule(
        kind="class",
        languages=frozenset({"go"}),
        pattern=re.compile(r"\btype\s+(\w+)\s+struct\b"),
    ),
    DetectionRule(
        kind="class",
        languages=frozenset({"rust"}),
        pattern=re.compile(r"\bstruct\s+(\w+)"),
    ),
    DetectionRule(
        kind="function",
        languages=_JS_FAMILY,
        pattern=re.compile(r"\bfunction\s+(\w+)\s*\("),
    ),
    DetectionRule(
        kind="function",
        languages=_JS_FAMILY,
        pattern=re.compile(r"\bconst\s+(\w+)\s*=\s*(?:async\s+)?\("),
    ),
    DetectionRule(
        kind="function",
        languages=_JS_FAMILY,
        pattern=re.compile(r"(\w+)\s*:\s*(?:async\s+)?\("),
    ),
    DetectionRule(
        kind="function",
        languages=frozenset({"python"}),
        pattern=re.compile(r"\bdef\s+(\w+)\s*\("),
    ),
    DetectionRule(
        kind="function",
        languages=frozenset({"go"}),
        pattern=re.compile(r"^\s*func\s+(?:\([^)]*\)\s*)?(\w+)\s*\("),
    ),
    DetectionRule(
        kind="function",
        languages=frozenset({"rust"}),
        pattern=re.compile(r"\bfn\s+(\w+)"),
    ),
    DetectionRule(
        kind="function",
        languages=frozenset({"ruby"}),
        pattern=re.compile(r"^\s*def\s+(?:self\.)?(\w+[?!]?)"),
    ),
    DetectionRule(
        kind="function",
        languages=frozenset({"php"}),
        pattern=re.compile(r"\bfunction\s+(\w+)\s*\("),
    ),
    DetectionRule(
        kind="function",
        languages=frozenset({"swift", "kotlin"}),
        pattern=re.compile(r"\b(?:func|fun)\s+(\w+)"),
    ),
    DetectionRule(
        kind="function",
        languages=frozenset({"java", "csharp"}),
        pattern=re.compile(
            r"^\s*(?:(?:public|private|protected|internal|static|final|async|override)\s+)+"
            r"[\w<>\[\],.?]+\s+(\w+)\s*\([^;]*$"
        ),
    ),
)

_PY_RETURN = re.compile(r"\)\s*->\s*([^:]+?)\s*:")
_TS_RETURN = re.compile(r"\)\s*:\s*([\w<>\[\]|., ]+?)\s*(?:\{|=>|$)")
_GO_RETURN = re.compile(r"\)\s+([\w*\[\].]+)\s*\{")


def detect_construct(line: str, language: str | None) -> DetectedConstruct | None:
    """Match one source line against the ordered rule list.

    Args:
        line: One line of source text.
        language: Language hint derived from the file extension.

    Returns:
        The first matching construct, or ``None``.
    """
    if language is None:
        return None
    for rule in DETECTION_RULES:
        if language not in rule.languages:
            continue
        match = rule.pattern.search(line)
        if match:
            return DetectedConstruct(
                kind=rule.kind, name=rule.name_of(match), signature=line.strip()
            )
    return None


def has_documentation(
    lines: list[str], line_index: int, language: str | None, window: int = 10
) -> bool:
    """Check whether a construct carries a doc comment.

    Python docstrings are looked up in the body that follows the declaration.
    Every other language looks for a doc comment marker in the preceding
    lines.

    Args:
        lines: All lines of the file.
        line_index: 0-based index of the declaration line.
        language: Language hint for the file.
        window: Number of lines to inspect.

    Returns:
        True when documentation is found.
    """
    if language == "python":
        return _has_python_docstring(lines, line_index, window)
    markers = _DOC_MARKERS.get(language or "", _DEFAULT_DOC_MARKERS)
    for index in range(max(0, line_index - window), line_index):
        stripped = lines[index].strip()
        if any(marker in stripped for marker in markers):
            return True
    return False


def determine_priority(name: str, kind: CodeItemKind) -> Priority:
    """Assign a documentation priority from construct kind and name keywords."""
    if kind == "api-route":
        return "high"
    lowered = name.lower()
    if lowered.startswith("public") or any(
        keyword in lowered for keyword in _HIGH_PRIORITY_KEYWORDS
    ):
        return "high"
    if any(keyword in lowered for keyword in _MEDIUM_PRIORITY_KEYWORDS):
        return "medium"
    return "low"


def suggested_doc_path(file_path: str, item_name: str) -> str:
    """Return ``<dir>/<file stem>.<item>.md`` for a construct."""
    path = PurePosixPath(file_path)
    safe_name = re.sub(r"[^\w.-]+", "_", item_name).strip("_") or "item"
    return str(path.parent / f"{path.stem}.{safe_name}.md")


def parse_parameters(signature: str, language: str | None) -> tuple[Parameter, ...]:
    """Parse a parameter list from a one-line declaration.

    Only the first parenthesized group is considered; multi-line signatures
    yield the parameters present on the declaration line.
    """
    start = signature.find("(")
    if start < 0:
        return ()
    depth = 0
    end = -1
    for index in range(start, len(signature)):
        char = signature[index]
        if char in "([{":
            depth += 1
        elif char in ")]}":
            depth -= 1
            if depth == 0:
                end = index
                break
    inner = signature[start + 1 : end] if end > 0 else signature[start + 1 :]
    parameters: list[Parameter] = []
    for part in _split_top_level(inner):
        part = part.split("=", 1)[0].strip()
        if not part or part in {"self", "cls", "*", "/"}:
            continue
        if ":" in part:
            name, type_text = part.split(":", 1)
            parameters.append(
                Parameter(name=name.strip().rstrip("?"), type=type_text.strip() or None)
            )
            continue
        words = part.split()
        if len(words) == 1:
            parameters.append(Parameter(name=words[0]))
        elif language == "go":
            parameters.append(Parameter(name=words[0], type=" ".join(words[1:])))
        else:
            parameters.append(Parameter(name=words[-1], type=" ".join(words[:-1])))
    return tuple(parameters)


def parse_return_type(signature: str, language: str | None) -> str | None:
    """Parse a return annotation from a one-line declaration, if present."""
    if language == "python":
        pattern = _PY_RETURN
    elif language == "typescript":
        pattern = _TS_RETURN
    elif language == "go":
        pattern = _GO_RETURN
    else:
        return None
    match = pattern.search(signature)
    if not match:
        return None
    return match.group(1).strip() or None


def scan_source(
    file_path: str, text: str, language: str | None, doc_window: int = 10
) -> list[CodeItem]:
    """Detect all constructs in one source file.

    Args:
        file_path: Workspace-relative POSIX path of the file.
        text: Full file text.
        language: Language hint for the file.
        doc_window: Look-back window for doc comment markers.

    Returns:
        Detected constructs in line order.
    """
    items: list[CodeItem] = []
    lines = text.split("\n")
    for index, line in enumerate(lines):
        construct = detect_construct(line, language)
        if construct is None:
            continue
        is_function = construct.kind == "function"
        items.append(
            CodeItem(
                kind=construct.kind,
                name=construct.name,
                file_path=file_path,
                line_number=index + 1,
                signature=construct.signature,
                priority=determine_priority(construct.name, construct.kind),
                has_documentation=has_documentation(
                    lines, index, language, window=doc_window
                ),
                suggested_doc_path=suggested_doc_path(file_path, construct.name),
                parameters=(
                    parse_parameters(construct.signature, language)
                    if is_function
                    else ()
                ),
                return_type=(
                    parse_return_type(construct.signature, language)
                    if is_function
                    else None
                ),
            )
        )
    logger.debug(f"Scanned source file (file_path={file_path} items={len(items)})")
    return items


def _split_top_level(text: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    previous = ""
    for char in text:
        if char in "([{<":
            depth += 1
        elif char in ")]}" or (char == ">" and previous not in {"=", "-"}):
            depth -= 1
        previous = char
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


def _has_python_docstring(lines: list[str], line_index: int, window: int) -> bool:
    end = min(len(lines), line_index + window + 1)
    index = line_index
    while index < end and lines[index].lstrip().startswith("@"):
        index += 1
    depth = 0
    while index < end:
        line = lines[index]
        for column, char in enumerate(line):
            if char in "([{":
                depth += 1
            elif char in ")]}":
                depth -= 1
            elif char == "#" and depth == 0:
                break
            elif char == ":" and depth == 0:
                body = line[column + 1 :].strip()
                if body and not body.startswith("#"):
                    return bool(_PY_DOCSTRING_OPENER.match(body))
                return _docstring_follows(lines, index + 1, end)
        index += 1
    return False


def _docstring_follows(lines: list[str], start: int, end: int) -> bool:
    for line in lines[start:end]:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        return bool(_PY_DOCSTRING_OPENER.match(stripped))
    return False
