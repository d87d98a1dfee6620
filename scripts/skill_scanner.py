#!/usr/bin/env python3
"""
Skill Package Validation - Directory Scanner

Finds skill packages under a skills root and loads each one from disk.

A package is an immediate subdirectory of the root holding a SKILL.md.
Directories are visited in name order so every run sees the same sequence
whatever order the filesystem lists them in. Nothing is cached: each call
to scan_skill_packages() reads the disk again.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from skill_frontmatter import parse_frontmatter
from skill_validation_common import (
    SKILL_FILE_NAME,
    SKIP_DIRS,
    MalformedFrontmatter,
    MissingSkillFile,
    SkillFileReadError,
    SkillPackage,
    SkillPackageError,
    count_lines,
)


def resolve_skills_root(path: Path) -> Path:
    """Return the directory holding the packages.

    Accepts either the skills directory itself or a repository root that
    contains a `skills/` directory.
    """
    nested = path / "skills"
    if nested.is_dir() and not (nested / SKILL_FILE_NAME).exists():
        return nested
    return path


def iter_skill_dirs(root: Path) -> Iterator[Path]:
    """Yield candidate package directories under root, sorted by name.

    Hidden directories (a leading dot, e.g. `.draft-skill/`) and tool/cache
    directories are skipped without being reported.
    """
    candidates = [
        item
        for item in root.iterdir()
        if item.is_dir() and not item.name.startswith(".") and item.name not in SKIP_DIRS
    ]
    yield from sorted(candidates, key=lambda item: item.name)


def read_skill_file(skill_md: Path) -> str:
    """Read SKILL.md as UTF-8 text.

    Raises:
        SkillFileReadError: The file could not be read or is not valid UTF-8
    """
    directory_name = skill_md.parent.name
    try:
        return skill_md.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise SkillFileReadError(
            f"{SKILL_FILE_NAME} is not valid UTF-8 (byte {e.start})",
            directory_name=directory_name,
        ) from e
    except OSError as e:
        raise SkillFileReadError(
            f"cannot read {SKILL_FILE_NAME}: {e.strerror or e}",
            directory_name=directory_name,
        ) from e


def load_skill_package(skill_dir: Path) -> SkillPackage:
    """Load one package from its directory.

    Args:
        skill_dir: Package directory

    Returns:
        SkillPackage with parsed frontmatter and body

    Raises:
        MissingSkillFile: The directory has no SKILL.md
        SkillFileReadError: SKILL.md could not be read
        MalformedFrontmatter: The frontmatter block could not be parsed
    """
    skill_md = skill_dir / SKILL_FILE_NAME
    if not skill_md.is_file():
        raise MissingSkillFile(
            f"{SKILL_FILE_NAME} not found in {skill_dir.name}/",
            directory_name=skill_dir.name,
        )

    content = read_skill_file(skill_md)
    try:
        parsed = parse_frontmatter(content)
    except MalformedFrontmatter as e:
        e.directory_name = skill_dir.name
        raise

    return SkillPackage(
        directory_name=skill_dir.name,
        path=skill_dir,
        frontmatter=parsed.fields,
        body=parsed.body,
        line_count=count_lines(content),
        end_line=parsed.end_line,
    )


def scan_skill_packages(root: Path) -> Iterator[SkillPackage | SkillPackageError]:
    """Lazily load every package under root.

    A package that cannot be loaded is yielded as the error that stopped
    it, so one broken directory never ends the scan for its siblings.
    """
    for skill_dir in iter_skill_dirs(root):
        try:
            yield load_skill_package(skill_dir)
        except SkillPackageError as e:
            yield e
