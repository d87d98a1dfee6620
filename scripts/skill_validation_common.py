#!/usr/bin/env python3
"""
Skill Package Validation - Common Module

Shared validation infrastructure for the skill package validator.
This module contains:
- Schema constants (field names, limits, name pattern)
- Type definitions (SkillPackage, Violation, ValidationResult)
- The package-level error taxonomy
- Exit codes, line counting and terminal color helpers

All validator modules import from here so rule ids, limits and output
formatting stay consistent.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# =============================================================================
# Schema Constants
# =============================================================================

SKILL_FILE_NAME = "SKILL.md"

MAX_SKILL_LINES = 500
MAX_SKILL_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 1024

DEFAULT_LICENSE = "MIT"

# Lowercase alphanumeric segments joined by single hyphens
NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

# Fields the frontmatter schema knows about (anything else is a warning)
SCHEMA_FIELDS = ("name", "description", "license", "metadata")

# Only this key may carry a nested mapping in the frontmatter block
NESTED_FIELD = "metadata"

# Optional auxiliary directories a package may ship
AUXILIARY_DIRS = ("references", "scripts", "assets")

# Directories to skip when scanning for packages (cache dirs, tool dirs)
SKIP_DIRS = {
    "__pycache__",
    "node_modules",
    ".git",
    ".venv",
    ".pytest_cache",
    ".mypy_cache",
    ".ruff_cache",
}

# =============================================================================
# Rule Identifiers
# =============================================================================

# Schema rules, listed in reporting order
RULE_MISSING_NAME = "missing-name"
RULE_MISSING_DESCRIPTION = "missing-description"
RULE_NAME_LENGTH = "name-length"
RULE_NAME_CHARSET = "name-charset"
RULE_NAME_DIR_MISMATCH = "name-dir-mismatch"
RULE_DESCRIPTION_LENGTH = "description-length"
RULE_FILE_TOO_LONG = "file-too-long"
RULE_METADATA_TYPE = "metadata-type"
RULE_LICENSE_EMPTY = "license-empty"

RULE_ORDER = (
    RULE_MISSING_NAME,
    RULE_MISSING_DESCRIPTION,
    RULE_NAME_LENGTH,
    RULE_NAME_CHARSET,
    RULE_NAME_DIR_MISMATCH,
    RULE_DESCRIPTION_LENGTH,
    RULE_FILE_TOO_LONG,
    RULE_METADATA_TYPE,
    RULE_LICENSE_EMPTY,
)

# Package-level failures (replace the whole rule table)
RULE_MALFORMED_FRONTMATTER = "malformed-frontmatter"
RULE_MISSING_SKILL_FILE = "missing-skill-file"
RULE_IO_ERROR = "io-error"

# Non-blocking warnings
RULE_UNKNOWN_FIELD = "unknown-field"
RULE_MISSING_REFERENCE = "missing-reference"

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_OK = 0  # Every discovered package passed
EXIT_FAILED = 1  # Violations found, no packages, or unusable root

# =============================================================================
# Error Taxonomy
# =============================================================================


class SkillPackageError(Exception):
    """A failure that prevents one package from being checked at all.

    Attributes:
        rule_id: Rule identifier the failure is reported under
        line: Optional 1-based line number in SKILL.md
    """

    rule_id = "package-error"

    def __init__(self, message: str, line: int | None = None, directory_name: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.directory_name = directory_name

    def to_violation(self) -> Violation:
        """Convert the failure into the single violation of its package."""
        return Violation(self.rule_id, self.message, self.line)


class MalformedFrontmatter(SkillPackageError):
    """Frontmatter block is missing, unterminated, or has an unparseable line."""

    rule_id = RULE_MALFORMED_FRONTMATTER


class MissingSkillFile(SkillPackageError):
    """A package directory has no SKILL.md."""

    rule_id = RULE_MISSING_SKILL_FILE


class SkillFileReadError(SkillPackageError):
    """SKILL.md exists but could not be read (permissions, races, bad encoding)."""

    rule_id = RULE_IO_ERROR


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class SkillPackage:
    """One skill package as read from disk.

    Attributes:
        directory_name: Name of the package directory (the expected skill name)
        path: Package directory
        frontmatter: Parsed frontmatter fields, in file order
        body: Markdown after the closing delimiter
        line_count: Number of lines in the full SKILL.md
        end_line: Line number of the closing frontmatter delimiter
    """

    directory_name: str
    path: Path
    frontmatter: dict[str, Any]
    body: str
    line_count: int
    end_line: int

    @property
    def license(self) -> Any:
        """License declared by the package, MIT when absent."""
        return self.frontmatter.get("license", DEFAULT_LICENSE)


@dataclass(frozen=True)
class Violation:
    """Single rule failure.

    Attributes:
        rule_id: Identifier of the failed rule
        message: Human-readable description naming the offending value
        line: Optional 1-based line number in SKILL.md
    """

    rule_id: str
    message: str
    line: int | None = None

    def to_dict(self) -> dict[str, str | int]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, str | int] = {"rule": self.rule_id, "message": self.message}
        if self.line is not None:
            result["line"] = self.line
        return result


@dataclass
class ValidationResult:
    """Outcome of checking one package.

    Violations block; warnings are always reported but only block in
    strict mode.
    """

    package_id: str
    violations: list[Violation] = field(default_factory=list)
    warnings: list[Violation] = field(default_factory=list)

    def add(self, rule_id: str, message: str, line: int | None = None) -> None:
        """Add a violation."""
        self.violations.append(Violation(rule_id, message, line))

    def warn(self, rule_id: str, message: str, line: int | None = None) -> None:
        """Add a non-blocking warning."""
        self.warnings.append(Violation(rule_id, message, line))

    @property
    def passed(self) -> bool:
        return not self.violations

    def passed_strict(self) -> bool:
        """Check the package passed with warnings counted as failures."""
        return not self.violations and not self.warnings

    @property
    def rule_ids(self) -> list[str]:
        """Rule ids of the violations, in reporting order."""
        return [v.rule_id for v in self.violations]

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "package": self.package_id,
            "passed": self.passed,
            "violations": [v.to_dict() for v in self.violations],
            "warnings": [w.to_dict() for w in self.warnings],
        }


# =============================================================================
# Line Handling
# =============================================================================


def split_lines(text: str) -> list[str]:
    """Split text into lines on `\\n` only, keeping the line endings.

    str.splitlines() also breaks on form feeds, vertical tabs and Unicode
    line separators, which editors show inside a single line.
    """
    lines = [line + "\n" for line in text.split("\n")]
    lines[-1] = lines[-1][:-1]
    if not lines[-1]:
        lines.pop()
    return lines


def count_lines(text: str) -> int:
    """Count lines the way an editor does; a trailing newline adds none."""
    return len(split_lines(text))


# =============================================================================
# Color Formatting (for terminal output)
# =============================================================================

# ANSI color codes
COLORS = {
    "FAIL": "\033[91m",  # Red
    "WARNING": "\033[95m",  # Magenta, never blocks unless --strict
    "INFO": "\033[90m",  # Gray
    "PASS": "\033[92m",  # Green
    "RESET": "\033[0m",  # Reset
    "BOLD": "\033[1m",  # Bold
}


def colorize(text: str, level: str, enabled: bool = True) -> str:
    """Apply color to text based on level."""
    if not enabled:
        return text
    color = COLORS.get(level, "")
    return f"{color}{text}{COLORS['RESET']}"


def format_violation(violation: Violation) -> str:
    """Format a single violation as `[rule-id] message (SKILL.md:line)`."""
    location = SKILL_FILE_NAME
    if violation.line:
        location += f":{violation.line}"
    return f"[{violation.rule_id}] {violation.message} ({location})"
