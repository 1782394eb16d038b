"""
Filesystem collectors for a target project.

Every collector returns its files sorted by name. Rule order is significant:
it is the order in which the rule stages run inside the assembled pipeline.
"""

from __future__ import annotations

import logging
from pathlib import Path

from lotus.components.driver.models import EXPECTED_FILE, INPUT_FILE
from lotus.core.entities import TestCase
from lotus.core.errors import ConfigurationError, FileAccessError

logger = logging.getLogger(__name__)

RULE_SUFFIX = ".conf"
SCRIPT_SUFFIX = ".rb"


def _list_dir(directory: Path, kind: str) -> list[Path]:
    try:
        return sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise FileAccessError(f"Listing the {kind} directory", directory) from e


def collect_rules(directory: Path) -> list[Path]:
    """
    Return every *.conf file in the rules directory.

    Raises ConfigurationError if the directory is missing or holds no rules.
    """
    if not directory.is_dir():
        raise ConfigurationError(f"Rules directory not found at: {directory}")
    rules = [p for p in _list_dir(directory, "rules") if p.is_file() and p.suffix == RULE_SUFFIX]
    if not rules:
        raise ConfigurationError(f"No *{RULE_SUFFIX} rule files found in {directory}")
    logger.info("Collected %d rule file(s) from %s", len(rules), directory)
    return rules


def collect_scripts(directory: Path) -> list[Path]:
    """Return every *.rb file in the scripts directory, or none if it is missing."""
    if not directory.is_dir():
        return []
    scripts = [
        p for p in _list_dir(directory, "scripts") if p.is_file() and p.suffix == SCRIPT_SUFFIX
    ]
    logger.info("Collected %d script file(s) from %s", len(scripts), directory)
    return scripts


def collect_patterns(directory: Path) -> list[Path]:
    """Return every file in the patterns directory, or none if it is missing."""
    if not directory.is_dir():
        return []
    patterns = [p for p in _list_dir(directory, "patterns") if p.is_file()]
    logger.info("Collected %d pattern file(s) from %s", len(patterns), directory)
    return patterns


def collect_tests(directory: Path) -> list[TestCase]:
    """
    Return one test case per subdirectory of the tests directory.

    Raises:
        ConfigurationError: the directory is missing or holds no cases.
        FileAccessError: a case directory lacks its input or expected fixture.
    """
    if not directory.is_dir():
        raise ConfigurationError(f"Tests directory not found at: {directory}")

    cases: list[TestCase] = []
    for case_dir in _list_dir(directory, "tests"):
        if not case_dir.is_dir():
            continue
        case = TestCase.from_directory(case_dir, INPUT_FILE, EXPECTED_FILE)
        for fixture in (case.input, case.expected):
            if not fixture.is_file():
                raise FileAccessError("Test case fixture not found", fixture)
        cases.append(case)

    if not cases:
        raise ConfigurationError(f"No test cases found in {directory}")
    logger.info("Collected %d test case(s) from %s", len(cases), directory)
    return cases
