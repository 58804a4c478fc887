"""Tests for command-line argument conversions."""

import argparse
from datetime import timedelta
from pathlib import Path

import pytest

from jwtctl.cli.inputs import UsageError, load_json_object, pairs_to_dict, parse_duration


class TestParseDuration:
    """Tests for ISO-8601 duration parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("PT10H", timedelta(hours=10)),
            ("PT2H30M", timedelta(hours=2, minutes=30)),
            ("P1DT12H", timedelta(days=1, hours=12)),
            ("PT1.5S", timedelta(seconds=1.5)),
            ("pt5m", timedelta(minutes=5)),
        ],
    )
    def test_valid(self, text: str, expected: timedelta) -> None:
        assert parse_duration(text) == expected

    @pytest.mark.parametrize("text", ["10H", "P", "PT", "PT5X", "soon"])
    def test_malformed(self, text: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError, match="invalid duration"):
            parse_duration(text)

    @pytest.mark.parametrize("text", ["-PT1H", "PT0S"])
    def test_not_positive(self, text: str) -> None:
        with pytest.raises(argparse.ArgumentTypeError, match="must be positive"):
            parse_duration(text)


class TestLoadJsonObject:
    """Tests for JSON claims/headers files."""

    def test_reads_object(self, tmp_path: Path) -> None:
        path = tmp_path / "claims.json"
        path.write_text('{"sub": "file", "roles": ["a", "b"], "n": 1}')
        assert load_json_object(path, "claims") == {
            "sub": "file",
            "roles": ["a", "b"],
            "n": 1,
        }

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(UsageError, match="Unable to find file"):
            load_json_object(tmp_path / "nope.json", "claims")

    @pytest.mark.parametrize("content", ["[1, 2]", "{not json", ""])
    def test_not_an_object(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "bad.json"
        path.write_text(content)
        with pytest.raises(UsageError, match="Unable to parse headers file"):
            load_json_object(path, "headers")


class TestPairsToDict:
    """Tests for repeated NAME VALUE options."""

    def test_last_value_wins(self) -> None:
        assert pairs_to_dict([["a", "1"], ["b", "2"], ["a", "3"]]) == {"a": "3", "b": "2"}

    def test_none(self) -> None:
        assert pairs_to_dict(None) == {}
