# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Framework, architecture and layer guesses from workspace signals."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

from docdrift.model import ProjectProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrameworkSignature:
    """Describe path and content patterns identifying one framework."""

    name: str
    path_patterns: tuple[re.Pattern[str], ...] = ()
    content_patterns: tuple[re.Pattern[str], ...] = ()


FRAMEWORK_SIGNATURES: tuple[FrameworkSignature, ...] = (
    FrameworkSignature(
        name="Next.js",
        path_patterns=(re.compile(r"(^|/)next\.config\.(js|mjs|ts)$"),),
        content_patterns=(re.compile(r"""from\s+['"]next(/[\w-]+)*['"]"""),),
    ),
    FrameworkSignature(
        name="NestJS",
        content_patterns=(
            re.compile(r"@Controller\("),
            re.compile(r"@Injectable\("),
            re.compile(r"from\s+['\"]@nestjs/"),
        ),
    ),
    FrameworkSignature(
        name="Angular",
        path_patterns=(re.compile(r"\.component\.ts$"),),
        content_patterns=(re.compile(r"from\s+['\"]@angular/"),),
    ),
    FrameworkSignature(
        name="React",
        path_patterns=(re.compile(r"\.(tsx|jsx)$"),),
        content_patterns=(re.compile(r"""from\s+['"]react['"]"""),),
    ),
    FrameworkSignature(
        name="Vue",
        path_patterns=(re.compile(r"\.vue$"),),
        content_patterns=(re.compile(r"""from\s+['"]vue['"]"""),),
    ),
    FrameworkSignature(
        name="Express",
        content_patterns=(
            re.compile(r"""from\s+['"]express['"]"""),
            re.compile(r"""require\(\s*['"]express['"]\s*\)"""),
        ),
    ),
    FrameworkSignature(
        name="FastAPI",
        content_patterns=(re.compile(r"from fastapi import"),),
    ),
    FrameworkSignature(
        name="Flask",
        content_patterns=(re.compile(r"from flask import"),),
    ),
    FrameworkSignature(
        name="Django",
        path_patterns=(re.compile(r"(^|/)manage\.py$"),),
        content_patterns=(re.compile(r"from django\b"),),
    ),
    FrameworkSignature(
        name="Spring Boot",
        content_patterns=(
            re.compile(r"@RestController"),
            re.compile(r"@SpringBootApplication"),
        ),
    ),
)

_TEST_PATH = re.compile(
    r"(^|/)(tests?|__tests__|spec)/|\.(test|spec)\.[jt]sx?$|(^|/)test_[^/]*\.py$|_test\.(py|go)$"
)


class ProjectProfiler:
    """Guess framework, architecture and layers for a set of files."""

    def profile(
        self, file_paths: list[str], contents: Mapping[str, str] | None = None
    ) -> ProjectProfile:
        """Profile a workspace from its paths and code file contents.

        Args:
            file_paths: Workspace-relative POSIX paths of all files.
            contents: Optional code file text keyed by path.

        Returns:
            Project profile; ``Unknown``/``Monolithic`` when nothing matches.
        """
        contents = contents or {}
        profile = ProjectProfile(
            framework=self.detect_framework(file_paths, contents),
            architecture=self.detect_architecture(file_paths),
            has_frontend=any(_is_frontend(path) for path in file_paths),
            has_backend=any(_is_backend(path) for path in file_paths),
            has_database=any(_is_database(path) for path in file_paths),
            has_tests=any(_TEST_PATH.search(path) for path in file_paths),
        )
        logger.debug(
            f"Profiled workspace (framework={profile.framework} "
            f"architecture={profile.architecture})"
        )
        return profile

    def detect_framework(
        self, file_paths: list[str], contents: Mapping[str, str]
    ) -> str:
        for signature in FRAMEWORK_SIGNATURES:
            if any(
                pattern.search(path)
                for pattern in signature.path_patterns
                for path in file_paths
            ):
                return signature.name
            if any(
                pattern.search(text)
                for pattern in signature.content_patterns
                for text in contents.values()
            ):
                return signature.name
        return "Unknown"

    def detect_architecture(self, file_paths: list[str]) -> str:
        if any("microservices" in path or "services/" in path for path in file_paths):
            return "Microservices"
        if any(
            "src/" in path and "components/" in path and "services/" in path
            for path in file_paths
        ):
            return "Layered Architecture"
        if any(
            "api/" in path and "models/" in path and "controllers/" in path
            for path in file_paths
        ):
            return "MVC"
        return "Monolithic"


def _is_frontend(path: str) -> bool:
    return "/src/" in f"/{path}" and path.endswith((".tsx", ".jsx", ".vue"))


def _is_backend(path: str) -> bool:
    padded = f"/{path}"
    return any(
        marker in padded for marker in ("/api/", "/server/", "/routes/", "/controllers/")
    )


def _is_database(path: str) -> bool:
    padded = f"/{path}"
    return path.endswith(".sql") or any(
        marker in padded for marker in ("/models/", "/schema/", "/migrations/")
    )
