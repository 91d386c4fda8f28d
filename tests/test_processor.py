"""
Tests for the line-processing loop.
"""

import io
import json
from pathlib import Path

import pytest

from grokparse.errors import SerializationError
from grokparse.extractor import Extractor
from grokparse.patterns import PatternCatalog
from grokparse.processor import Processor
from grokparse.render import CsvRenderer, JsonRenderer
from grokparse.sinks import ConsoleSink, FileSink
from grokparse.sources import ConsoleSource, FileSequenceSource

INPUT = "GET 200\nbroken\nPOST 201\n\nPUT 204"


def make_processor(renderer, emit_stats: bool = True) -> Processor:
    pattern = PatternCatalog().compile("%{WORD:verb} %{INT:status}")
    return Processor(extractor=Extractor(pattern=pattern), renderer=renderer, emit_stats=emit_stats)


@pytest.fixture
def streams():
    return io.StringIO(), io.StringIO()


class TestProcessJson:
    """JSON runs against console streams."""

    def test_routes_successes_and_failures(self, streams) -> None:
        out, err = streams
        processor = make_processor(JsonRenderer())

        stats = processor.process(ConsoleSource(io.StringIO(INPUT)), ConsoleSink(out, err))

        assert out.getvalue().splitlines() == [
            '{"status":"200","verb":"GET"}',
            '{"status":"201","verb":"POST"}',
            '{"status":"204","verb":"PUT"}',
            '{"parsed":3,"failed":2}',
        ]
        assert err.getvalue().splitlines() == [
            'no match against data: "broken"',
            'no match against data: ""',
        ]
        assert (stats.parsed, stats.failed) == (3, 2)

    def test_lines_consumed_equal_parsed_plus_failed(self, streams) -> None:
        source = ConsoleSource(io.StringIO(INPUT))

        stats = make_processor(JsonRenderer()).process(source, ConsoleSink(*streams))

        assert source.lines_read == stats.parsed + stats.failed

    def test_output_round_trips_to_extracted_fields(self, streams) -> None:
        out, err = streams
        processor = make_processor(JsonRenderer(), emit_stats=False)
        expected = [processor.extractor.pattern.match(line) for line in ("GET 200", "POST 201", "PUT 204")]

        processor.process(ConsoleSource(io.StringIO(INPUT)), ConsoleSink(out, err))

        assert [json.loads(line) for line in out.getvalue().splitlines()] == expected

    def test_stats_can_be_disabled(self, streams) -> None:
        out, err = streams

        make_processor(JsonRenderer(), emit_stats=False).process(
            ConsoleSource(io.StringIO("GET 200\n")), ConsoleSink(out, err)
        )

        assert out.getvalue() == '{"status":"200","verb":"GET"}\n'

    def test_serialization_failure_goes_to_error_channel(self, streams, monkeypatch) -> None:
        out, err = streams
        renderer = JsonRenderer()
        calls = []

        def render_record(fields):
            calls.append(fields)
            if len(calls) == 1:
                raise SerializationError("Could not serialize record as JSON: boom")
            return ["ok"]

        monkeypatch.setattr(renderer, "render_record", render_record)

        stats = make_processor(renderer, emit_stats=False).process(
            ConsoleSource(io.StringIO("GET 200\nPUT 204\n")), ConsoleSink(out, err)
        )

        assert out.getvalue() == "ok\n"
        assert err.getvalue() == "Could not serialize record as JSON: boom\n"
        assert stats.parsed == 2


class TestProcessCsv:
    """CSV runs."""

    def test_header_once_then_rows_and_stats(self, streams) -> None:
        out, err = streams

        make_processor(CsvRenderer()).process(ConsoleSource(io.StringIO(INPUT)), ConsoleSink(out, err))

        assert out.getvalue().splitlines() == [
            '"status", "verb"',
            '"200", "GET"',
            '"201", "POST"',
            '"204", "PUT"',
            '"parsed", "failed"',
            "3, 2",
        ]
        assert len(err.getvalue().splitlines()) == 2

    def test_failures_before_first_match_do_not_emit_header(self, streams) -> None:
        out, err = streams

        make_processor(CsvRenderer(), emit_stats=False).process(
            ConsoleSource(io.StringIO("nope\nGET 200\n")), ConsoleSink(out, err)
        )

        assert out.getvalue().splitlines() == ['"status", "verb"', '"200", "GET"']


class TestProcessFiles:
    """Runs over input files into a file sink."""

    def test_end_to_end_with_files(self, write_file, tmp_path: Path) -> None:
        first = write_file("in/1.log", "GET 200\nbad\n")
        second = write_file("in/2.log", "PUT 204")
        sink = FileSink(tmp_path / "out.json")

        with FileSequenceSource([first, second]) as source:
            make_processor(JsonRenderer()).process(source, sink)

        assert (tmp_path / "out.json").read_text(encoding="utf-8").splitlines() == [
            '{"status":"204","verb":"PUT"}',
            '{"status":"200","verb":"GET"}',
            '{"parsed":2,"failed":1}',
        ]
        assert (tmp_path / "out.json.err").read_text(encoding="utf-8") == 'no match against data: "bad"\n'

    def test_io_error_stops_the_run(self, write_file, tmp_path: Path) -> None:
        present = write_file("present.log", "GET 200\n")
        source = FileSequenceSource([tmp_path / "missing.log", present])

        with pytest.raises(FileNotFoundError):
            make_processor(JsonRenderer()).process(source, ConsoleSink(io.StringIO(), io.StringIO()))
