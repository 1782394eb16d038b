"""
Compare component unit tests.
"""

from __future__ import annotations

import pytest

from lotus.components.compare import (
    Difference,
    compare_strict,
    describe,
    json_type,
    render_report,
)


class TestEqual:
    @pytest.mark.parametrize(
        "value",
        [
            {},
            {"dummy": "true"},
            [1, "two", None, {"three": [3.0]}],
            None,
            False,
            0,
            "",
        ],
    )
    def test_identical_documents_match(self, value: object) -> None:
        assert compare_strict(value, value).matches

    def test_key_order_does_not_matter(self) -> None:
        assert compare_strict({"a": 1, "b": 2}, {"b": 2, "a": 1}).matches


class TestObjects:
    def test_extra_key_in_actual(self) -> None:
        output = compare_strict({"dummy": "true", "@version": "1"}, {"dummy": "true"})

        assert output.differences == [Difference('["@version"]', "added", actual="1")]

    def test_missing_key_in_actual(self) -> None:
        output = compare_strict({}, {"dummy": "true"})

        assert output.differences == [Difference(".dummy", "removed", expected="true")]

    def test_nested_change(self) -> None:
        actual = {"http": {"request": {"body": {"bytes": "2"}}}}
        expected = {"http": {"request": {"body": {"bytes": "3"}}}}

        output = compare_strict(actual, expected)

        assert output.differences == [
            Difference(".http.request.body.bytes", "changed", actual="2", expected="3")
        ]


class TestArrays:
    def test_order_sensitive(self) -> None:
        output = compare_strict({"tags": ["a", "b"]}, {"tags": ["b", "a"]})

        assert [d.path for d in output.differences] == [".tags[0]", ".tags[1]"]

    def test_longer_actual(self) -> None:
        output = compare_strict([1, 2, 3], [1, 2])

        assert output.differences == [Difference("[2]", "added", actual=3)]

    def test_shorter_actual(self) -> None:
        output = compare_strict([1], [1, {"x": 1}])

        assert output.differences == [Difference("[1]", "removed", expected={"x": 1})]


class TestScalars:
    @pytest.mark.parametrize(
        ("actual", "expected"),
        [
            (True, 1),
            (0, False),
            (1, 1.0),
            ("1", 1),
            (None, "null"),
            ({}, []),
        ],
    )
    def test_type_mismatch(self, actual: object, expected: object) -> None:
        output = compare_strict(actual, expected)

        assert output.differences == [Difference("(root)", "changed", actual, expected)]

    def test_value_mismatch(self) -> None:
        output = compare_strict({"n": 5066}, {"n": 5067})

        assert output.differences[0].kind == "changed"

    def test_json_type_rejects_non_json(self) -> None:
        with pytest.raises(TypeError):
            json_type({1, 2})


class TestReport:
    def test_describe_kinds(self) -> None:
        assert "missing from expected" in describe(Difference(".a", "added", actual=1))
        assert "missing from actual" in describe(Difference(".a", "removed", expected=1))
        changed = describe(Difference(".a", "changed", actual=1, expected=2))
        assert "are not equal" in changed
        assert "actual:\n        1" in changed

    def test_report_with_payloads(self) -> None:
        output = compare_strict({"dummy": "false"}, {"dummy": "true"})

        report = render_report(
            output, {"dummy": "false"}, {"dummy": "true"}, include_payloads=True
        )

        assert '".dummy"' in report
        assert 'actual:\n{\n  "dummy": "false"\n}' in report
        assert 'expected:\n{\n  "dummy": "true"\n}' in report

    def test_report_without_payloads(self) -> None:
        output = compare_strict({"a": 1}, {})

        assert "expected:\n{" not in render_report(output, {"a": 1}, {})
