from __future__ import annotations

from typing import Callable, List

from richlog.reassembly.fragments import CompletedItem
from richlog.reassembly.reassembler import Reassembler
from richlog.runtime.clock import Clock, RealClock
from richlog.runtime.logging import EventSink, NullLogger
from richlog.sources.base import ILineSource


class LogReader:
    def __init__(
        self,
        source: ILineSource,
        reassembler: Reassembler | None = None,
        logger: EventSink | None = None,
        clock: Clock | None = None,
        on_item: Callable[[CompletedItem], None] | None = None,
    ) -> None:
        self._source = source
        self._logger = logger or NullLogger()
        self._reassembler = reassembler or Reassembler(logger=self._logger)
        self._clock = clock or RealClock()
        self._on_item = on_item
        self._stop = False
        self._idle = False
        self.items: List[CompletedItem] = []

    @property
    def reassembler(self) -> Reassembler:
        return self._reassembler

    def stop(self) -> None:
        self._stop = True

    def process_once(self, timeout_ms: int = 0) -> CompletedItem | None:
        if self._stop:
            return None
        line = self._source.read_line(timeout_ms=timeout_ms)
        self._idle = line is None
        if line is None:
            return None
        item = self._reassembler.ingest(line)
        if item is None:
            return None
        self.items.append(item)
        if self._on_item is not None:
            self._on_item(item)
        return item

    def run(
        self,
        step_ms: int = 5,
        *,
        max_items: int | None = None,
        max_seconds: float | None = None,
    ) -> List[CompletedItem]:
        deadline_ms: int | None = None
        if max_seconds is not None:
            if max_seconds < 0:
                raise ValueError("max_seconds must be >= 0")
            deadline_ms = self._clock.now_ms() + int(max_seconds * 1000.0)
        while not self._stop:
            if max_items is not None and len(self.items) >= max_items:
                break
            if deadline_ms is not None and self._clock.now_ms() >= deadline_ms:
                break
            if self._source.exhausted:
                break
            self.process_once()
            if self._idle and step_ms > 0:
                self._clock.sleep_ms(step_ms)
        self._logger.log_event("reader_done", self._reassembler.stats())
        return list(self.items)
