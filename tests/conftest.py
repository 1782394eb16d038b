import json
from collections.abc import Callable
from pathlib import Path

import pytest

DUMMY_RULE = 'filter { mutate { add_field => { "[dummy]" => "true" } } }\n'

CaseWriter = Callable[[Path, str, object, object], Path]


def _write_case(tests_dir: Path, name: str, input_value: object, expected_value: object) -> Path:
    case_dir = tests_dir / name
    case_dir.mkdir(parents=True)
    (case_dir / "input.json").write_text(json.dumps(input_value))
    (case_dir / "expected.json").write_text(json.dumps(expected_value))
    return case_dir


@pytest.fixture
def write_case() -> CaseWriter:
    """Writes tests_dir/<name>/{input,expected}.json and returns the case directory."""
    return _write_case


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    A target project with one rule and four empty-object test cases, laid
    out the way the CLI expects: rules/, tests/<case>/{input,expected}.json.
    """
    target = tmp_path / "project"
    rules_dir = target / "rules"
    rules_dir.mkdir(parents=True)
    (rules_dir / "10-dummy.conf").write_text(DUMMY_RULE)

    for i in range(4):
        _write_case(target / "tests", f"empty-{i}", {}, {"dummy": "true"})

    return target


@pytest.fixture
def cache_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    root = tmp_path / "cache"
    monkeypatch.setenv("LOTUS_CACHE_DIR", str(root))
    return root
