# ABOUTME: JSON filter configuration for manual organization by filename regex.
# ABOUTME: Loads and validates nested filter rules, then assigns files to filter folders.

import json
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from comicshelf.core.organizer import Assignment

UNMATCHED_FOLDER = "_Unmatched"


class FilterConfigError(Exception):
    """Raised when a filter configuration file is missing or invalid."""


@dataclass
class FilterRule:
    """A named regex filter with optional child filters.

    Children only see the files their parent matched.
    """

    name: str
    pattern: re.Pattern[str]
    children: list["FilterRule"] = field(default_factory=list)

    def matches(self, file: Path) -> bool:
        return self.pattern.search(file.name) is not None


def _parse_rule(raw: Any, parent: str, errors: list[str]) -> FilterRule | None:
    if not isinstance(raw, dict):
        errors.append(f"Filter under {parent or 'root'} must be an object")
        return None

    name = raw.get("name")
    path = f"{parent}.{name}" if parent else str(name)
    if not isinstance(name, str) or not name:
        errors.append(f'Filter at {parent or "root"} must have a "name" string')

    pattern_text = raw.get("pattern")
    compiled: re.Pattern[str] | None = None
    if not isinstance(pattern_text, str) or not pattern_text:
        errors.append(f'Filter "{path}" must have a "pattern" string')
    else:
        try:
            compiled = re.compile(pattern_text, re.IGNORECASE)
        except re.error as exc:
            errors.append(f'Filter "{path}" has invalid regex pattern: {exc}')

    children: list[FilterRule] = []
    raw_children = raw.get("filters")
    if raw_children is not None:
        if not isinstance(raw_children, list):
            errors.append(f'Filter "{path}" has a "filters" value that is not an array')
        else:
            for child in raw_children:
                rule = _parse_rule(child, path, errors)
                if rule is not None:
                    children.append(rule)

    if compiled is None or not isinstance(name, str) or not name:
        return None
    return FilterRule(name=name, pattern=compiled, children=children)


def parse_filter_config(data: Any) -> list[FilterRule]:
    """Validate a decoded filter configuration and build its rules.

    Every problem is collected before raising, so users see all of them at once.

    Raises:
        FilterConfigError: If the configuration is invalid.
    """
    if not isinstance(data, dict) or not isinstance(data.get("filters"), list):
        raise FilterConfigError(
            'Invalid configuration:\n  - Configuration must have a "filters" array'
        )

    errors: list[str] = []
    rules: list[FilterRule] = []
    for raw in data["filters"]:
        rule = _parse_rule(raw, "", errors)
        if rule is not None:
            rules.append(rule)
    if errors:
        raise FilterConfigError("Invalid configuration:\n  - " + "\n  - ".join(errors))
    return rules


def load_filter_config(path: Path) -> list[FilterRule]:
    """Load and validate a JSON filter configuration file.

    Raises:
        FilterConfigError: If the file is missing, isn't JSON, or is invalid.
    """
    if not path.is_file():
        raise FilterConfigError(f"Configuration file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FilterConfigError(f"Could not read configuration {path}: {exc}") from exc
    return parse_filter_config(data)


def _assign(files: Sequence[Path], rules: Sequence[FilterRule], parent: str) -> list[Assignment]:
    assignments: list[Assignment] = []
    assigned: set[Path] = set()

    for rule in rules:
        folder = f"{parent}/{rule.name}" if parent else rule.name
        matched = [f for f in files if f not in assigned and rule.matches(f)]

        if rule.children:
            for assignment in _assign(matched, rule.children, folder):
                assignments.append(assignment)
                assigned.add(assignment.file)

        for file in matched:
            if file not in assigned:
                assignments.append(Assignment(file=file, folder=folder))
                assigned.add(file)

    return assignments


def apply_filters(
    files: Sequence[Path],
    rules: Sequence[FilterRule],
    *,
    unmatched_folder: str | None = None,
) -> list[Assignment]:
    """Assign files to filter folders; the first matching filter at each level wins.

    Files a parent matched but none of its children did stay in the parent's
    folder. Files no filter matched go to unmatched_folder when given,
    otherwise they are left out of the plan.
    """
    assignments = _assign(files, rules, "")
    if unmatched_folder:
        assigned = {a.file for a in assignments}
        assignments.extend(
            Assignment(file=f, folder=unmatched_folder) for f in files if f not in assigned
        )
    return assignments
