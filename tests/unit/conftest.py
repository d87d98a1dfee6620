#!/usr/bin/env python3
"""Shared fixtures for skill package validator tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

DEFAULT_DESCRIPTION = "Guides agents through WordPress VIP development practices. Use when editing VIP code."


def render_skill(
    name: str | None = "wordpress-vip",
    description: str | None = DEFAULT_DESCRIPTION,
    extra: str = "",
    body: str = "# WordPress VIP\n\nFollow the platform guidelines.\n",
) -> str:
    """Build SKILL.md text; pass None to leave a field out."""
    lines = ["---"]
    if name is not None:
        lines.append(f"name: {name}")
    if description is not None:
        lines.append(f"description: {description}")
    if extra:
        lines.append(extra.rstrip("\n"))
    lines.append("---")
    return "\n".join(lines) + "\n" + body


def body_of(line_count: int) -> str:
    """Body with the given number of lines."""
    return "".join(f"line {i}\n" for i in range(line_count))


@pytest.fixture
def skills_root(tmp_path: Path) -> Path:
    root = tmp_path / "skills"
    root.mkdir()
    return root


@pytest.fixture
def make_skill(skills_root: Path) -> Callable[..., Path]:
    """Factory creating skills/<directory_name>/SKILL.md.

    Pass text=None to create the directory without a SKILL.md.
    """

    def _make(directory_name: str, text: str | None = "", **kwargs: object) -> Path:
        skill_dir = skills_root / directory_name
        skill_dir.mkdir(parents=True)
        if text is None:
            return skill_dir
        if not text:
            kwargs.setdefault("name", directory_name)
            text = render_skill(**kwargs)  # type: ignore[arg-type]
        (skill_dir / "SKILL.md").write_text(text, encoding="utf-8")
        return skill_dir

    return _make


@pytest.fixture
def skill_text() -> Callable[..., str]:
    """SKILL.md text builder (see render_skill)."""
    return render_skill


@pytest.fixture
def skill_body() -> Callable[[int], str]:
    """Body builder with an exact line count."""
    return body_of
