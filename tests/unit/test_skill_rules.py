#!/usr/bin/env python3
"""Tests for skill_rules.py - the fixed frontmatter rule set."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from skill_rules import check_skill_package, describe_name_problem, find_local_references, result_for_error
from skill_validation_common import (
    RULE_ORDER,
    MalformedFrontmatter,
    MissingSkillFile,
    SkillPackage,
)

DESCRIPTION = "Guides agents through WordPress VIP development practices."


def make_package(
    frontmatter: dict[str, Any],
    directory_name: str = "wordpress-vip",
    line_count: int = 10,
    body: str = "",
    path: Path | None = None,
    end_line: int = 4,
) -> SkillPackage:
    return SkillPackage(
        directory_name=directory_name,
        path=path or Path(directory_name),
        frontmatter=frontmatter,
        body=body,
        line_count=line_count,
        end_line=end_line,
    )


def valid_frontmatter(**overrides: Any) -> dict[str, Any]:
    frontmatter: dict[str, Any] = {"name": "wordpress-vip", "description": DESCRIPTION}
    frontmatter.update(overrides)
    return frontmatter


class TestValidPackages:
    """Packages that satisfy every rule."""

    def test_minimal_package_passes(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter()))
        assert result.passed
        assert result.violations == []
        assert result.warnings == []
        assert result.package_id == "wordpress-vip"

    def test_all_schema_fields(self) -> None:
        frontmatter = valid_frontmatter(license="Apache-2.0", metadata={"author": "vip", "version": "1.0"})
        result = check_skill_package(make_package(frontmatter))
        assert result.passed

    def test_limits_are_inclusive(self) -> None:
        """64-char names, 1024-char descriptions and 500-line files are accepted."""
        name = "a" * 64
        package = make_package({"name": name, "description": "d" * 1024}, directory_name=name, line_count=500)
        assert check_skill_package(package).passed

    def test_license_defaults_to_mit(self) -> None:
        assert make_package(valid_frontmatter()).license == "MIT"
        assert make_package(valid_frontmatter(license="GPL-2.0-or-later")).license == "GPL-2.0-or-later"

    def test_single_character_name(self) -> None:
        assert check_skill_package(make_package(valid_frontmatter(name="a"), directory_name="a")).passed


class TestRequiredFields:
    """missing-name and missing-description."""

    def test_missing_name_fires_once(self) -> None:
        """No name-* rule reports on an absent name."""
        result = check_skill_package(make_package({"description": DESCRIPTION}))
        assert result.rule_ids == ["missing-name"]
        assert result.violations[0].message == "name field is required"

    def test_missing_description_fires_once(self) -> None:
        result = check_skill_package(make_package({"name": "wordpress-vip"}))
        assert result.rule_ids == ["missing-description"]
        assert result.violations[0].message == "description field is required"

    def test_missing_both(self) -> None:
        result = check_skill_package(make_package({}))
        assert result.rule_ids == ["missing-name", "missing-description"]

    def test_missing_name_independent_of_other_failures(self) -> None:
        result = check_skill_package(make_package({"description": ""}, line_count=900))
        assert result.rule_ids.count("missing-name") == 1
        assert result.rule_ids == ["missing-name", "description-length", "file-too-long"]


class TestNameRules:
    """name-length, name-charset and name-dir-mismatch."""

    def test_directory_mismatch(self) -> None:
        """Directory Page-CRO does not match name page-cro."""
        result = check_skill_package(make_package(valid_frontmatter(name="page-cro"), directory_name="Page-CRO"))
        assert result.rule_ids == ["name-dir-mismatch"]
        assert "'page-cro' != 'Page-CRO'" in result.violations[0].message

    def test_leading_hyphen(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(name="-page"), directory_name="-page"))
        assert result.rule_ids == ["name-charset"]
        assert "leading hyphen" in result.violations[0].message

    def test_trailing_hyphen(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(name="page-"), directory_name="page-"))
        assert result.rule_ids == ["name-charset"]
        assert "trailing hyphen" in result.violations[0].message

    def test_consecutive_hyphens(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(name="page--cro"), directory_name="page--cro"))
        assert result.rule_ids == ["name-charset"]
        assert "consecutive hyphens at position 5" in result.violations[0].message

    def test_uppercase_character_is_named(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(name="Page-CRO"), directory_name="Page-CRO"))
        assert result.rule_ids == ["name-charset"]
        assert "invalid character 'P' at position 1" in result.violations[0].message

    def test_too_long(self) -> None:
        name = "a" * 65
        result = check_skill_package(make_package(valid_frontmatter(name=name), directory_name=name))
        assert result.rule_ids == ["name-length"]
        assert "(got 65)" in result.violations[0].message

    def test_empty_name(self) -> None:
        """An empty name is present, so every name rule evaluates it."""
        result = check_skill_package(make_package(valid_frontmatter(name="")))
        assert result.rule_ids == ["name-length", "name-charset", "name-dir-mismatch"]

    @pytest.mark.parametrize(
        ("name", "problem"),
        [
            ("", "name is empty"),
            ("snake_case", "invalid character '_' at position 6"),
            ("café", "invalid character 'é' at position 4"),
            ("-x", "leading hyphen"),
            ("x-", "trailing hyphen"),
            ("a--b", "consecutive hyphens at position 2"),
        ],
    )
    def test_describe_name_problem(self, name: str, problem: str) -> None:
        assert describe_name_problem(name) == problem


class TestOtherRules:
    """description-length, file-too-long, metadata-type and license-empty."""

    def test_description_too_long(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(description="d" * 1025)))
        assert result.rule_ids == ["description-length"]
        assert "(got 1025)" in result.violations[0].message

    def test_description_empty(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(description="")))
        assert result.rule_ids == ["description-length"]

    def test_file_too_long(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(), line_count=501))
        assert result.rule_ids == ["file-too-long"]
        assert result.violations[0].message == "SKILL.md exceeds 500 lines (got 501)"

    def test_metadata_not_a_mapping(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(metadata="author: vip")))
        assert result.rule_ids == ["metadata-type"]
        assert "got a string" in result.violations[0].message

    def test_metadata_list(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(metadata=["a", "b"])))
        assert result.rule_ids == ["metadata-type"]
        assert "got a list" in result.violations[0].message

    def test_metadata_nested_values_are_named(self) -> None:
        metadata = {"author": "vip", "extra": {"deep": "x"}, "tags": ["a"]}
        result = check_skill_package(make_package(valid_frontmatter(metadata=metadata)))
        assert result.rule_ids == ["metadata-type"]
        message = result.violations[0].message
        assert "'extra' is a mapping" in message
        assert "'tags' is a list" in message
        assert "'author'" not in message

    def test_blank_license(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(license="  ")))
        assert result.rule_ids == ["license-empty"]

    def test_violations_follow_rule_order_not_key_order(self) -> None:
        """Keys listed backwards still produce violations in table order."""
        frontmatter = {"license": "", "metadata": "x", "description": "", "name": "Bad--"}
        result = check_skill_package(make_package(frontmatter, directory_name="other", line_count=600))
        assert result.rule_ids == [
            "name-charset",
            "name-dir-mismatch",
            "description-length",
            "file-too-long",
            "metadata-type",
            "license-empty",
        ]
        assert result.rule_ids == [rule for rule in RULE_ORDER if rule in result.rule_ids]


class TestWarnings:
    """Non-blocking unknown-field and missing-reference warnings."""

    def test_unknown_fields_warn_in_sorted_order(self) -> None:
        result = check_skill_package(make_package(valid_frontmatter(zeta="1", **{"allowed-tools": "Read"})))
        assert result.passed
        assert [w.rule_id for w in result.warnings] == ["unknown-field", "unknown-field"]
        assert "'allowed-tools'" in result.warnings[0].message
        assert "'zeta'" in result.warnings[1].message

    def test_missing_reference(self, tmp_path: Path) -> None:
        """Only the missing auxiliary file is reported, with its SKILL.md line."""
        (tmp_path / "scripts").mkdir()
        (tmp_path / "scripts" / "run.sh").write_text("#!/bin/sh\n")
        body = (
            "# Title\n"
            "\n"
            "See [guide](references/guide.md) and [docs](https://example.com/references/x.md).\n"
            "Run [the script](scripts/run.sh#usage).\n"
        )
        # 4 frontmatter lines plus 4 body lines
        package = make_package(valid_frontmatter(), body=body, line_count=8, path=tmp_path)
        result = check_skill_package(package)
        assert result.passed
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.rule_id == "missing-reference"
        assert warning.message == "referenced file not found: references/guide.md"
        assert warning.line == 7

    def test_reference_line_counts_from_closing_delimiter(self, tmp_path: Path) -> None:
        """Form feeds in the body do not shift the reported line."""
        body = "intro\x0cmore intro\n[guide](references/guide.md)\n"
        package = make_package(valid_frontmatter(), body=body, line_count=6, path=tmp_path, end_line=4)
        (warning,) = check_skill_package(package).warnings
        assert warning.line == 6

    def test_reference_line_after_longer_frontmatter(self, tmp_path: Path) -> None:
        body = "[guide](references/guide.md)\n"
        package = make_package(valid_frontmatter(), body=body, line_count=8, path=tmp_path, end_line=7)
        (warning,) = check_skill_package(package).warnings
        assert warning.line == 8

    def test_references_found_once_and_outside_code_fences(self) -> None:
        body = (
            "![diagram](./assets/flow.png)\n"
            "```markdown\n"
            "[example](references/example.md)\n"
            "```\n"
            "[again](assets/flow.png) [other](notes/todo.md) [anchor](#usage)\n"
        )
        assert find_local_references(body) == [("assets/flow.png", 0)]


class TestPackageErrors:
    """Load failures become a single violation."""

    def test_missing_skill_file(self) -> None:
        error = MissingSkillFile("SKILL.md not found in empty/", directory_name="empty")
        result = result_for_error(error)
        assert result.package_id == "empty"
        assert result.rule_ids == ["missing-skill-file"]
        assert not result.passed

    def test_malformed_frontmatter_keeps_line(self) -> None:
        error = MalformedFrontmatter("duplicate key 'name'", line=4, directory_name="broken")
        result = result_for_error(error)
        assert result.rule_ids == ["malformed-frontmatter"]
        assert result.violations[0].line == 4
