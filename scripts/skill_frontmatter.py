#!/usr/bin/env python3
"""
Skill Package Validation - Frontmatter Parser

Splits a SKILL.md file into its frontmatter block and markdown body.

The block must open on the first line with a line that is exactly `---`
and close with the next line that is exactly `---`. Its content is read
with PyYAML's BaseLoader, so every scalar stays a string: `yes`, `1.0`
and `null` are kept verbatim instead of being coerced.

Only a narrow subset of YAML is accepted:
- the top level must be a mapping of plain keys to plain values
- `metadata` is the only key that may carry a nested mapping or list
- keys must not repeat

Anything else raises MalformedFrontmatter with the 1-based line number of
the offending line in the original file.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import yaml
from skill_validation_common import NESTED_FIELD, MalformedFrontmatter, split_lines

DELIMITER = "---"

# Line 1 holds the opening delimiter, so block line 0 is file line 2
BLOCK_LINE_OFFSET = 2


@dataclass(frozen=True)
class ParsedFrontmatter:
    """Frontmatter fields plus the body that follows them.

    Attributes:
        fields: Top-level keys mapped to strings (or the raw structure under `metadata`)
        body: Text after the closing delimiter line
        end_line: 1-based line number of the closing delimiter
    """

    fields: dict[str, Any]
    body: str
    end_line: int


def _file_line(mark: yaml.Mark | None) -> int | None:
    if mark is None:
        return None
    return mark.line + BLOCK_LINE_OFFSET


def find_block(text: str) -> tuple[str, str, int]:
    """Locate the frontmatter block.

    Returns:
        Tuple of (block_text, body, closing_line_number)

    Raises:
        MalformedFrontmatter: No opening delimiter, or no closing one
    """
    lines = split_lines(text)
    if not lines:
        raise MalformedFrontmatter("file is empty, expected frontmatter opening with '---'", line=1)

    first = lines[0].rstrip("\r\n")
    if first != DELIMITER:
        if first.lstrip("\ufeff") == DELIMITER:
            raise MalformedFrontmatter("file starts with a UTF-8 BOM before the opening '---'", line=1)
        raise MalformedFrontmatter(f"first line must be '---', found {first!r}", line=1)

    for index, line in enumerate(lines[1:], start=1):
        if line.rstrip("\r\n") == DELIMITER:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return block, body, index + 1

    raise MalformedFrontmatter("frontmatter opened with '---' is never closed", line=1)


def _scalar_key(node: yaml.Node) -> str:
    if not isinstance(node, yaml.ScalarNode):
        raise MalformedFrontmatter(
            "frontmatter keys must be plain strings",
            line=_file_line(node.start_mark),
        )
    return node.value


def _construct(node: yaml.Node, line: int | None, seen: set[int]) -> Any:
    """Build plain Python values from a composed node (used under `metadata`).

    An alias composes to the very node its anchor names, so a mapping or
    list met twice is an alias. Those are rejected, never expanded.
    """
    if isinstance(node, yaml.ScalarNode):
        return node.value

    if id(node) in seen:
        raise MalformedFrontmatter("aliases to mappings or lists are not supported in frontmatter", line=line)
    seen.add(id(node))

    if isinstance(node, yaml.SequenceNode):
        return [_construct(item, line, seen) for item in node.value]

    mapping: dict[str, Any] = {}
    for key_node, value_node in node.value:
        key = _scalar_key(key_node)
        key_line = _file_line(key_node.start_mark)
        if key in mapping:
            raise MalformedFrontmatter(f"duplicate key '{key}'", line=key_line)
        mapping[key] = _construct(value_node, key_line, seen)
    return mapping


def _error_mark(error: yaml.MarkedYAMLError, block: str) -> yaml.Mark | None:
    """Pick the mark on the line that caused a YAML error.

    The scanner reports the position where it gave up, which is past the
    token it was reading, and a problem found at the end of the block sits on
    the closing delimiter. In both cases the context mark starts the
    offending token.
    """
    problem = error.problem_mark
    if error.context_mark is not None and (
        isinstance(error, yaml.scanner.ScannerError) or problem is None or problem.index >= len(block)
    ):
        return error.context_mark
    return problem


def parse_fields(block: str) -> dict[str, Any]:
    """Parse the text between the delimiters into a field mapping.

    Raises:
        MalformedFrontmatter: Invalid YAML, or structure outside the supported subset
    """
    try:
        root = yaml.compose(block, Loader=yaml.BaseLoader)
    except yaml.MarkedYAMLError as e:
        mark = _error_mark(e, block)
        problem = e.problem or e.context or "invalid YAML"
        raise MalformedFrontmatter(f"unparseable frontmatter line: {problem}", line=_file_line(mark)) from e
    except yaml.YAMLError as e:
        raise MalformedFrontmatter(f"unparseable frontmatter: {e}", line=BLOCK_LINE_OFFSET) from e

    # Empty block, or only comments
    if root is None:
        return {}

    if not isinstance(root, yaml.MappingNode):
        raise MalformedFrontmatter(
            "frontmatter must be a list of 'key: value' lines",
            line=_file_line(root.start_mark),
        )

    fields: dict[str, Any] = {}
    for key_node, value_node in root.value:
        key = _scalar_key(key_node)
        line = _file_line(key_node.start_mark)
        if key in fields:
            raise MalformedFrontmatter(f"duplicate key '{key}'", line=line)

        if key == NESTED_FIELD:
            fields[key] = _construct(value_node, line, set())
        elif isinstance(value_node, yaml.ScalarNode):
            fields[key] = value_node.value
        else:
            raise MalformedFrontmatter(
                f"'{key}' must be a plain value (only '{NESTED_FIELD}' may hold a nested mapping)",
                line=line,
            )
    return fields


def parse_frontmatter(text: str) -> ParsedFrontmatter:
    """Parse frontmatter and body from SKILL.md content.

    Args:
        text: Full SKILL.md content

    Returns:
        ParsedFrontmatter with fields, body and closing line number

    Raises:
        MalformedFrontmatter: The block is missing, unterminated or unparseable
    """
    block, body, end_line = find_block(text)
    return ParsedFrontmatter(fields=parse_fields(block), body=body, end_line=end_line)
