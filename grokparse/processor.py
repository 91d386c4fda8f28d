from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import SerializationError
from .extractor import Extractor
from .render import Renderer
from .sinks import Sink
from .sources import LineSource
from .types import Failed, Stats

logger = logging.getLogger(__name__)


@dataclass
class Processor:
    extractor: Extractor
    renderer: Renderer
    emit_stats: bool = True

    def process(self, source: LineSource, sink: Sink) -> Stats:
        """Route every line of ``source`` to ``sink`` and return the run's stats.

        Lines that do not match, and records that cannot be rendered, go to
        the failure channel and the loop carries on. I/O errors propagate.
        """
        for line in source:
            outcome = self.extractor.extract(line)
            if isinstance(outcome, Failed):
                sink.write_failure(self.renderer.render_failure(outcome))
                continue
            try:
                rendered = self.renderer.render_record(outcome.fields)
            except SerializationError as e:
                sink.write_failure(str(e))
                continue
            for text in rendered:
                sink.write_success(text)

        stats = self.extractor.stats
        logger.info("Processed %d line(s): %d parsed, %d failed", stats.total, stats.parsed, stats.failed)
        if self.emit_stats:
            self._emit_stats(stats, sink)
        return stats

    def _emit_stats(self, stats: Stats, sink: Sink) -> None:
        try:
            rendered = self.renderer.render_stats(stats)
        except SerializationError as e:
            sink.write_failure(str(e))
            return
        for text in rendered:
            sink.write_success(text)
