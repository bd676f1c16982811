# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Path-keyword clustering of code files into project domains."""

import logging
from pathlib import PurePosixPath

from docdrift.model import CodeItem, DomainType, Priority, ProjectDomain

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN: str = "Core"

DOMAIN_KEYWORDS: tuple[tuple[frozenset[str], str], ...] = (
    (frozenset({"auth", "authentication"}), "Authentication"),
    (frozenset({"user", "users"}), "User Management"),
    (frozenset({"product", "products"}), "Product Management"),
    (frozenset({"order", "orders"}), "Order Management"),
    (frozenset({"payment", "payments"}), "Payment Processing"),
    (frozenset({"notification", "notifications"}), "Notifications"),
    (frozenset({"admin", "administration"}), "Administration"),
    (frozenset({"api", "routes"}), "API Routes"),
    (frozenset({"service", "services"}), "Business Services"),
    (frozenset({"util", "utils"}), "Utilities"),
    (frozenset({"config", "configuration"}), "Configuration"),
)

DOMAIN_TYPE_KEYWORDS: tuple[tuple[frozenset[str], DomainType], ...] = (
    (frozenset({"api", "routes"}), "api"),
    (frozenset({"service", "services"}), "service"),
    (frozenset({"component", "components"}), "component"),
    (frozenset({"util", "utils"}), "utility"),
    (frozenset({"config", "configuration"}), "config"),
)

DOMAIN_DESCRIPTIONS: dict[str, str] = {
    "Authentication": "User authentication, authorization, and security management",
    "User Management": "User profiles, registration, and account management",
    "Product Management": "Product catalog, inventory, and product-related operations",
    "Order Management": "Order processing, fulfillment, and order tracking",
    "Payment Processing": "Payment gateway integration and transaction handling",
    "Notifications": "Email, SMS, and push notification services",
    "Administration": "Admin panel, user management, and system administration",
    "API Routes": "REST API endpoints and route handlers",
    "Business Services": "Core business logic and service layer",
    "Utilities": "Helper functions, common utilities, and shared code",
    "Configuration": "Application configuration and environment settings",
    "Core": "Core application functionality and main components",
}

HIGH_PRIORITY_DOMAINS: frozenset[str] = frozenset(
    {"Authentication", "User Management", "API Routes", "Core"}
)
MEDIUM_PRIORITY_DOMAINS: frozenset[str] = frozenset(
    {"Product Management", "Order Management", "Payment Processing", "Business Services"}
)


def path_segments(file_path: str) -> set[str]:
    """Return lower-cased directory names plus the file stem of a path."""
    path = PurePosixPath(file_path)
    segments = {part.lower() for part in path.parent.parts if part not in {".", "/"}}
    segments.add(path.stem.lower())
    return segments


def domain_name_for(file_path: str) -> str:
    """Return the first domain whose keywords match a path segment."""
    segments = path_segments(file_path)
    for keywords, name in DOMAIN_KEYWORDS:
        if segments & keywords:
            return name
    return DEFAULT_DOMAIN


def domain_type_for(file_path: str) -> DomainType:
    """Infer a domain type from the directory names of a path."""
    directories = {part.lower() for part in PurePosixPath(file_path).parent.parts}
    for keywords, domain_type in DOMAIN_TYPE_KEYWORDS:
        if directories & keywords:
            return domain_type
    return "service"


def domain_priority_for(domain_name: str) -> Priority:
    if domain_name in HIGH_PRIORITY_DOMAINS:
        return "high"
    if domain_name in MEDIUM_PRIORITY_DOMAINS:
        return "medium"
    return "low"


def domain_description_for(domain_name: str) -> str:
    return DOMAIN_DESCRIPTIONS.get(
        domain_name, f"Core functionality for {domain_name.lower()}"
    )


class DomainClusterer:
    """Group code files into domains and aggregate their constructs."""

    def cluster(
        self, code_files: list[str], items_by_file: dict[str, list[CodeItem]]
    ) -> list[ProjectDomain]:
        """Assign every code file to exactly one domain.

        Args:
            code_files: Workspace-relative code file paths.
            items_by_file: Detected constructs keyed by file path.

        Returns:
            Domains in order of first appearance.
        """
        domains: dict[str, ProjectDomain] = {}
        for file_path in code_files:
            name = domain_name_for(file_path)
            domain = domains.get(name)
            if domain is None:
                domain = ProjectDomain(
                    name=name,
                    type=domain_type_for(file_path),
                    description=domain_description_for(name),
                    priority=domain_priority_for(name),
                )
                domains[name] = domain
            domain.files.append(file_path)
            for item in items_by_file.get(file_path, []):
                if item.kind == "api-route":
                    domain.endpoints.append(item)
                elif item.kind in {"class", "interface"}:
                    domain.classes.append(item)
                elif item.kind == "function":
                    domain.functions.append(item)
        logger.debug(
            f"Clustered code files into domains (files={len(code_files)} domains={len(domains)})"
        )
        return list(domains.values())
