"""
Strict structural JSON comparison.

Objects must have identical key sets, arrays are compared index by index
and must have the same length, and scalars must agree on both JSON type and
value. Python's own equality is too lenient for this (True == 1, 1 == 1.0),
so scalar types are classified explicitly.
"""

from __future__ import annotations

import json
from typing import Any

from lotus.components.compare.models import ROOT_PATH, ComparisonOutput, Difference


def json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


def _key_path(path: str, key: str) -> str:
    if key.isidentifier():
        return f"{path}.{key}"
    return f"{path}[{json.dumps(key)}]"


def _walk(actual: Any, expected: Any, path: str, out: list[Difference]) -> None:
    actual_type = json_type(actual)
    expected_type = json_type(expected)

    if actual_type != expected_type:
        out.append(Difference(path or ROOT_PATH, "changed", actual, expected))
        return

    if actual_type == "object":
        for key in actual:
            if key not in expected:
                out.append(Difference(_key_path(path, key), "added", actual=actual[key]))
        for key in expected:
            if key not in actual:
                out.append(Difference(_key_path(path, key), "removed", expected=expected[key]))
            else:
                _walk(actual[key], expected[key], _key_path(path, key), out)
        return

    if actual_type == "array":
        for index in range(max(len(actual), len(expected))):
            item_path = f"{path}[{index}]"
            if index >= len(expected):
                out.append(Difference(item_path, "added", actual=actual[index]))
            elif index >= len(actual):
                out.append(Difference(item_path, "removed", expected=expected[index]))
            else:
                _walk(actual[index], expected[index], item_path, out)
        return

    if actual != expected:
        out.append(Difference(path or ROOT_PATH, "changed", actual, expected))


def compare_strict(actual: Any, expected: Any) -> ComparisonOutput:
    """Compare two parsed JSON documents in strict mode."""
    differences: list[Difference] = []
    _walk(actual, expected, "", differences)
    return ComparisonOutput(differences=differences)


# --- Reporting ---


def _inline(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def describe(difference: Difference) -> str:
    if difference.kind == "added":
        return (
            f"json atom at path \"{difference.path}\" is missing from expected: "
            f"{_inline(difference.actual)}"
        )
    if difference.kind == "removed":
        return (
            f"json atom at path \"{difference.path}\" is missing from actual: "
            f"{_inline(difference.expected)}"
        )
    return (
        f"json atoms at path \"{difference.path}\" are not equal:\n"
        f"    actual:\n        {_inline(difference.actual)}\n"
        f"    expected:\n        {_inline(difference.expected)}"
    )


def render_report(
    output: ComparisonOutput,
    actual: Any = None,
    expected: Any = None,
    include_payloads: bool = False,
) -> str:
    """Format the differences, optionally followed by both full payloads."""
    lines = [describe(d) for d in output.differences]
    report = "\n\n".join(lines)
    if include_payloads:
        report += (
            f"\n\nactual:\n{json.dumps(actual, indent=2, ensure_ascii=False)}"
            f"\n\nexpected:\n{json.dumps(expected, indent=2, ensure_ascii=False)}"
        )
    return report
