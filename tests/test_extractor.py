"""
Unit tests for the Extractor.
"""

from pathlib import Path

import pytest

from grokparse.errors import CompileError, ConfigError
from grokparse.extractor import Extractor
from grokparse.patterns import PatternCatalog
from grokparse.types import Failed, Matched, Stats


@pytest.fixture
def extractor() -> Extractor:
    pattern = PatternCatalog().compile("%{WORD:verb} %{IPV4:ip} %{INT:code}")
    return Extractor(pattern=pattern)


class TestExtract:
    """Tests for Extractor.extract."""

    def test_match_builds_sorted_field_map(self, extractor: Extractor) -> None:
        outcome = extractor.extract("GET 10.0.0.1 200\n")

        assert outcome == Matched(fields={"code": "200", "ip": "10.0.0.1", "verb": "GET"})
        assert list(outcome.fields) == ["code", "ip", "verb"]
        assert extractor.stats == Stats(parsed=1, failed=0)

    def test_no_match_is_a_failed_outcome(self, extractor: Extractor) -> None:
        outcome = extractor.extract("garbage\n")

        assert outcome == Failed(reason="no match", raw_line="garbage")
        assert extractor.stats == Stats(parsed=0, failed=1)

    def test_trailing_whitespace_is_trimmed_before_matching(self) -> None:
        pattern = PatternCatalog().compile("%{GREEDYDATA:rest}")
        outcome = Extractor(pattern=pattern).extract("value   \r\n")

        assert outcome.fields == {"rest": "value"}

    def test_every_line_counted_once(self, extractor: Extractor) -> None:
        lines = ["GET 1.2.3.4 1", "x", "PUT 5.6.7.8 2", "", "y"]

        for line in lines:
            extractor.extract(line)

        assert extractor.stats.parsed == 2
        assert extractor.stats.failed == 3
        assert extractor.stats.total == len(lines)

    def test_stats_are_shared_with_caller(self) -> None:
        stats = Stats()
        extractor = Extractor(pattern=PatternCatalog().compile("%{INT:n}"), stats=stats)

        extractor.extract("42")

        assert stats.parsed == 1


class TestFromTemplate:
    """Tests for Extractor.from_template."""

    def test_with_patterns_directory(self, patterns_dir: Path) -> None:
        extractor = Extractor.from_template("%{client}", patterns_dir=patterns_dir)

        assert extractor.extract("client 10.0.0.1").fields == {"client": "10.0.0.1"}

    def test_aliases_extend_defaults(self, patterns_dir: Path) -> None:
        extractor = Extractor.from_template("%{WORD:w} %{client}", patterns_dir=patterns_dir)

        assert extractor.extract("host 10.0.0.1").fields == {"client": "10.0.0.1", "w": "host"}

    def test_no_default_patterns_without_directory(self) -> None:
        with pytest.raises(CompileError):
            Extractor.from_template("%{WORD:w}", no_default_patterns=True)

    def test_no_default_patterns_keeps_aliases(self, patterns_dir: Path) -> None:
        extractor = Extractor.from_template("%{client}", patterns_dir=patterns_dir, no_default_patterns=True)

        assert extractor.extract("10.0.0.1").fields == {"client": "10.0.0.1"}

        with pytest.raises(CompileError):
            Extractor.from_template("%{IPV4}", patterns_dir=patterns_dir, no_default_patterns=True)

    def test_bad_patterns_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            Extractor.from_template("%{WORD}", patterns_dir=tmp_path / "missing")
