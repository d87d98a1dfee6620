#!/usr/bin/env python3
"""
Skill Package Validation - CLI

Validates every skill package under a skills directory: frontmatter schema,
naming rules, file length and best-effort reference checks.

Usage:
    uv run python scripts/validate_skills.py                 # ./skills
    uv run python scripts/validate_skills.py path/to/skills/
    uv run python scripts/validate_skills.py path/to/repo/   # uses repo/skills/
    uv run python scripts/validate_skills.py path/to/skills/ --verbose
    uv run python scripts/validate_skills.py path/to/skills/ --json
    uv run python scripts/validate_skills.py path/to/skills/ --strict

Exit codes:
    0 - Every package passed
    1 - At least one package failed, no packages were found,
        or the root path does not exist
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from skill_report import exit_code_for, format_report, report_to_json, validate_skills_root
from skill_scanner import resolve_skills_root
from skill_validation_common import EXIT_FAILED

DEFAULT_ROOT = "skills"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="validate-skills",
        description="Validate skill packages (SKILL.md frontmatter, naming and length rules)",
        epilog=(
            "Directories whose names start with a dot (e.g. .draft-skill/) are not packages "
            "and are skipped silently."
        ),
    )
    parser.add_argument(
        "root",
        nargs="?",
        default=DEFAULT_ROOT,
        help=f"Skills directory, or a repository root containing one (default: ./{DEFAULT_ROOT})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Also list the rules each package passed",
    )
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument("--strict", action="store_true", help="Strict mode: warnings also fail validation")
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    root = Path(args.root)
    if not root.exists():
        print(f"Error: {root} does not exist", file=sys.stderr)
        return EXIT_FAILED
    if not root.is_dir():
        print(f"Error: {root} is not a directory", file=sys.stderr)
        return EXIT_FAILED

    try:
        results = validate_skills_root(resolve_skills_root(root))
    except OSError as e:
        print(f"Error: cannot list {root}: {e.strerror or e}", file=sys.stderr)
        return EXIT_FAILED

    if args.json:
        print(report_to_json(results, strict=args.strict))
    else:
        color = not args.no_color and sys.stdout.isatty()
        report = format_report(
            results,
            title=f"Skill Validation: {args.root}",
            verbose=args.verbose,
            color=color,
            strict=args.strict,
        )
        print(report, end="")

    return exit_code_for(results, strict=args.strict)


if __name__ == "__main__":
    sys.exit(main())
