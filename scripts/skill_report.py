#!/usr/bin/env python3
"""
Skill Package Validation - Report Formatter

Runs the scanner and rule checker over a skills root and folds the
per-package results into one text or JSON report plus an exit code.

Packages are always reported sorted by directory name and violations in
rule-table order, so two runs over an unchanged tree produce identical
output.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from skill_rules import check_skill_package, result_for_error
from skill_scanner import scan_skill_packages
from skill_validation_common import (
    EXIT_FAILED,
    EXIT_OK,
    RULE_ORDER,
    SkillPackageError,
    ValidationResult,
    colorize,
    format_violation,
)


def validate_skills_root(root: Path) -> list[ValidationResult]:
    """Validate every package under root.

    Args:
        root: Directory whose subdirectories are skill packages

    Returns:
        One ValidationResult per package, sorted by package id
    """
    results: list[ValidationResult] = []
    for item in scan_skill_packages(root):
        if isinstance(item, SkillPackageError):
            results.append(result_for_error(item))
        else:
            results.append(check_skill_package(item))
    return sorted(results, key=lambda r: r.package_id)


def exit_code_for(results: Iterable[ValidationResult], strict: bool = False) -> int:
    """Get exit code for a run.

    A run with no packages fails: there was nothing to validate.
    """
    results = list(results)
    if not results:
        return EXIT_FAILED
    if strict:
        ok = all(r.passed_strict() for r in results)
    else:
        ok = all(r.passed for r in results)
    return EXIT_OK if ok else EXIT_FAILED


def _passed_rules(result: ValidationResult) -> list[str]:
    failed = set(result.rule_ids)
    return [rule for rule in RULE_ORDER if rule not in failed]


def format_package(result: ValidationResult, verbose: bool = False, color: bool = False) -> list[str]:
    """Format one package block as a list of lines."""
    if result.passed:
        lines = [f"{colorize('PASS', 'PASS', color)}  {result.package_id}"]
    else:
        lines = [f"{colorize('FAIL', 'FAIL', color)}  {result.package_id}"]

    for violation in result.violations:
        lines.append(f"  {colorize('error', 'FAIL', color)}   {format_violation(violation)}")
    for warning in result.warnings:
        lines.append(f"  {colorize('warning', 'WARNING', color)} {format_violation(warning)}")

    # Load failures never reach the rule table, so there is nothing to list
    if verbose and not any(v.rule_id not in RULE_ORDER for v in result.violations):
        for rule in _passed_rules(result):
            lines.append(f"  {colorize('passed', 'INFO', color)}  [{rule}]")
    return lines


def format_report(
    results: list[ValidationResult],
    title: str = "Skill Validation",
    verbose: bool = False,
    color: bool = False,
    strict: bool = False,
) -> str:
    """Render the human-readable report.

    Args:
        results: Results in reporting order
        title: Header line
        verbose: Also list the rules each package passed
        color: Emit ANSI color codes
        strict: Count warnings as failures in the final status

    Returns:
        The report text, newline-terminated
    """
    lines = ["=" * 60, colorize(title, "BOLD", color), "=" * 60, ""]

    for result in results:
        lines.extend(format_package(result, verbose, color))

    failed = sum(1 for r in results if not r.passed)
    warnings = sum(len(r.warnings) for r in results)
    lines.append("")
    lines.append("-" * 60)
    lines.append(
        f"{len(results)} package(s): {len(results) - failed} passed, {failed} failed, {warnings} warning(s)"
    )

    exit_code = exit_code_for(results, strict)
    if not results:
        lines.append(colorize("✗ No skill packages found", "FAIL", color))
    elif exit_code == EXIT_OK:
        lines.append(colorize("✓ Skill validation passed", "PASS", color))
    elif failed == 0:
        lines.append(colorize("✗ Warnings block validation in --strict mode", "WARNING", color))
    else:
        lines.append(colorize("✗ Skill validation failed", "FAIL", color))

    return "\n".join(lines) + "\n"


def report_to_dict(results: list[ValidationResult], strict: bool = False) -> dict[str, object]:
    """Convert a run to a dictionary for JSON serialization."""
    return {
        "exit_code": exit_code_for(results, strict),
        "counts": {
            "packages": len(results),
            "passed": sum(1 for r in results if r.passed),
            "failed": sum(1 for r in results if not r.passed),
            "warnings": sum(len(r.warnings) for r in results),
        },
        "packages": [r.to_dict() for r in results],
    }


def report_to_json(results: list[ValidationResult], strict: bool = False, indent: int = 2) -> str:
    return json.dumps(report_to_dict(results, strict), indent=indent)

