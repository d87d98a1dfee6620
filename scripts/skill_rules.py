#!/usr/bin/env python3
"""
Skill Package Validation - Rule Checker

Applies the fixed frontmatter rule set to one loaded SkillPackage.

Every rule runs on every package so a single pass surfaces every problem.
Violations come out in rule-table order, never in frontmatter key order:

    missing-name, missing-description, name-length, name-charset,
    name-dir-mismatch, description-length, file-too-long, metadata-type,
    license-empty

Rules that would inspect an absent field are skipped, so a missing `name`
only ever produces `missing-name`.

After the rules, two non-blocking checks add warnings: unknown frontmatter
fields, and body links into references/, scripts/ or assets/ whose target
does not exist.
"""

from __future__ import annotations

import re
import string
from typing import Any

from skill_validation_common import (
    AUXILIARY_DIRS,
    MAX_DESCRIPTION_LENGTH,
    MAX_SKILL_LINES,
    MAX_SKILL_NAME_LENGTH,
    NAME_PATTERN,
    RULE_DESCRIPTION_LENGTH,
    RULE_FILE_TOO_LONG,
    RULE_LICENSE_EMPTY,
    RULE_METADATA_TYPE,
    RULE_MISSING_DESCRIPTION,
    RULE_MISSING_NAME,
    RULE_MISSING_REFERENCE,
    RULE_NAME_CHARSET,
    RULE_NAME_DIR_MISMATCH,
    RULE_NAME_LENGTH,
    RULE_UNKNOWN_FIELD,
    SCHEMA_FIELDS,
    SKILL_FILE_NAME,
    SkillPackage,
    SkillPackageError,
    ValidationResult,
)

NAME_CHARACTERS = set(string.ascii_lowercase + string.digits + "-")

# Markdown links and images: [text](target) or [text](target "title")
RE_LOCAL_LINK = re.compile(r"!?\[[^\]]*\]\(\s*<?([^)\s>]+)>?(?:\s+\"[^\"]*\")?\s*\)")

# Fenced code blocks, whose links are examples rather than references
RE_CODE_FENCE = re.compile(r"^(```|~~~).*?^\1", re.MULTILINE | re.DOTALL)


def _type_name(value: Any) -> str:
    if isinstance(value, dict):
        return "mapping"
    if isinstance(value, list):
        return "list"
    return "string"


def describe_name_problem(name: str) -> str:
    """Explain why a name fails the charset rule, naming the offending part."""
    if not name:
        return "name is empty"
    for position, char in enumerate(name, start=1):
        if char not in NAME_CHARACTERS:
            return f"invalid character {char!r} at position {position}"
    if name.startswith("-"):
        return "leading hyphen"
    if name.endswith("-"):
        return "trailing hyphen"
    return f"consecutive hyphens at position {name.index('--') + 1}"


# =============================================================================
# Schema Rules
# =============================================================================


def check_name(frontmatter: dict[str, Any], directory_name: str, result: ValidationResult) -> None:
    """Run name-length, name-charset and name-dir-mismatch."""
    if "name" not in frontmatter:
        return
    name = frontmatter["name"]

    if not 1 <= len(name) <= MAX_SKILL_NAME_LENGTH:
        result.add(RULE_NAME_LENGTH, f"name must be 1-{MAX_SKILL_NAME_LENGTH} characters (got {len(name)})")

    if not NAME_PATTERN.match(name):
        result.add(
            RULE_NAME_CHARSET,
            f"name must be lowercase alphanumeric with single hyphens: {name!r} has {describe_name_problem(name)}",
        )

    if name != directory_name:
        result.add(
            RULE_NAME_DIR_MISMATCH,
            f"name must match directory name exactly ({name!r} != {directory_name!r})",
        )


def check_description(frontmatter: dict[str, Any], result: ValidationResult) -> None:
    """Run description-length."""
    if "description" not in frontmatter:
        return
    length = len(frontmatter["description"])
    if not 1 <= length <= MAX_DESCRIPTION_LENGTH:
        result.add(
            RULE_DESCRIPTION_LENGTH,
            f"description must be 1-{MAX_DESCRIPTION_LENGTH} characters (got {length})",
        )


def check_metadata(frontmatter: dict[str, Any], result: ValidationResult) -> None:
    """Run metadata-type: values must all be plain strings."""
    if "metadata" not in frontmatter:
        return
    metadata = frontmatter["metadata"]

    if not isinstance(metadata, dict):
        result.add(RULE_METADATA_TYPE, f"metadata must be a flat key-value mapping (got a {_type_name(metadata)})")
        return

    nested = [f"{key!r} is a {_type_name(value)}" for key, value in metadata.items() if not isinstance(value, str)]
    if nested:
        result.add(RULE_METADATA_TYPE, f"metadata must be a flat key-value mapping ({', '.join(nested)})")


def check_skill_package(package: SkillPackage) -> ValidationResult:
    """Check one package against the rule table.

    Args:
        package: Package loaded by the scanner

    Returns:
        ValidationResult with violations in rule-table order, then warnings
    """
    result = ValidationResult(package_id=package.directory_name)
    frontmatter = package.frontmatter

    if "name" not in frontmatter:
        result.add(RULE_MISSING_NAME, "name field is required")
    if "description" not in frontmatter:
        result.add(RULE_MISSING_DESCRIPTION, "description field is required")

    check_name(frontmatter, package.directory_name, result)
    check_description(frontmatter, result)

    if package.line_count > MAX_SKILL_LINES:
        result.add(RULE_FILE_TOO_LONG, f"{SKILL_FILE_NAME} exceeds {MAX_SKILL_LINES} lines (got {package.line_count})")

    check_metadata(frontmatter, result)

    if "license" in frontmatter and not package.license.strip():
        result.add(RULE_LICENSE_EMPTY, "license must be a non-empty string (omit it to default to MIT)")

    check_unknown_fields(frontmatter, result)
    check_references(package, result)
    return result


def result_for_error(error: SkillPackageError) -> ValidationResult:
    """Build the result of a package that could not be loaded."""
    result = ValidationResult(package_id=error.directory_name)
    result.violations.append(error.to_violation())
    return result


# =============================================================================
# Warnings (never block unless --strict)
# =============================================================================


def check_unknown_fields(frontmatter: dict[str, Any], result: ValidationResult) -> None:
    for key in sorted(set(frontmatter) - set(SCHEMA_FIELDS)):
        result.warn(RULE_UNKNOWN_FIELD, f"unknown frontmatter field {key!r} (ignored)")


def find_local_references(body: str) -> list[tuple[str, int]]:
    """Find links from the body into the package's auxiliary directories.

    Returns:
        List of (relative_target, line_offset_in_body), first occurrence only
    """
    fences = [m.span() for m in RE_CODE_FENCE.finditer(body)]
    seen: set[str] = set()
    references: list[tuple[str, int]] = []

    for match in RE_LOCAL_LINK.finditer(body):
        if any(start <= match.start() < end for start, end in fences):
            continue
        target = match.group(1).split("#", 1)[0]
        if target.startswith("./"):
            target = target[2:]
        if target.split("/", 1)[0] not in AUXILIARY_DIRS or target in seen:
            continue
        seen.add(target)
        references.append((target, body.count("\n", 0, match.start())))
    return references


def check_references(package: SkillPackage, result: ValidationResult) -> None:
    """Warn about body links to auxiliary files that do not exist."""
    body_start = package.end_line + 1
    for target, offset in find_local_references(package.body):
        if not (package.path / target).exists():
            result.warn(
                RULE_MISSING_REFERENCE,
                f"referenced file not found: {target}",
                line=body_start + offset,
            )
