from __future__ import annotations

from typing import Dict, Iterable, List, Set, Tuple

from richlog.protocol.errors import (
    DuplicateChunkIndex,
    FragmentMismatch,
    MalformedHex,
    MissingChunk,
)
from richlog.protocol.wire import WireLine, recognize_line
from richlog.reassembly.fragments import CompletedItem, FragmentBuffer
from richlog.runtime.logging import EventSink, NullLogger


class Reassembler:
    """Rebuilds payloads from wire lines scattered through a text log.

    Feed every log line, in file order, to :meth:`ingest`. Lines that are not
    wire lines are ignored. When the last missing chunk of a correlation id
    arrives the completed item is returned and kept in the completed store
    until the owner evicts it. A finished correlation id is not reopened
    unless the owner evicts it with ``forget=True``.

    Per-line problems (type/total conflicts, assembly failures) are reported
    to ``logger`` and never raised. Instances are not thread-safe.
    """

    def __init__(self, logger: EventSink | None = None) -> None:
        self._logger = logger or NullLogger()
        self._pending: Dict[str, FragmentBuffer] = {}
        self._completed: Dict[str, CompletedItem] = {}
        self._finished: Set[str] = set()
        self._stats = {
            "lines_seen": 0,
            "wire_lines": 0,
            "chunks_accepted": 0,
            "duplicates": 0,
            "rejected": 0,
            "late_chunks": 0,
            "completed": 0,
            "assembly_failed": 0,
        }

    @staticmethod
    def recognize_line(line: str) -> WireLine | None:
        return recognize_line(line)

    def ingest(self, line: str) -> CompletedItem | None:
        self._stats["lines_seen"] += 1
        wire = recognize_line(line)
        if wire is None:
            return None
        self._stats["wire_lines"] += 1
        return self.ingest_wire(wire)

    def ingest_wire(self, wire: WireLine) -> CompletedItem | None:
        if wire.uuid in self._finished:
            self._stats["late_chunks"] += 1
            return None
        buffer = self._pending.get(wire.uuid)
        if buffer is None:
            buffer = FragmentBuffer.start(wire)
            self._pending[wire.uuid] = buffer
        try:
            buffer.accept(wire)
            buffer.add(wire.index, wire.hex_chunk)
        except DuplicateChunkIndex:
            self._stats["duplicates"] += 1
            return None
        except FragmentMismatch as exc:
            self._stats["rejected"] += 1
            self._logger.log_event(
                "chunk_rejected",
                {
                    "uuid": wire.uuid,
                    "index": wire.index,
                    "error": type(exc).__name__,
                    "reason": str(exc),
                },
            )
            return None
        self._stats["chunks_accepted"] += 1
        if not buffer.is_complete():
            return None
        return self._complete(buffer)

    def _complete(self, buffer: FragmentBuffer) -> CompletedItem | None:
        try:
            item = buffer.to_item()
        except MissingChunk as exc:
            self._report_failure(buffer, exc)
            return None
        except MalformedHex as exc:
            # First-seen chunks are final, so this buffer can never become valid.
            del self._pending[buffer.uuid]
            self._report_failure(buffer, exc)
            return None
        del self._pending[buffer.uuid]
        self._completed[item.uuid] = item
        self._finished.add(item.uuid)
        self._stats["completed"] += 1
        self._logger.log_event(
            "item_completed",
            {"uuid": item.uuid, "type": item.type, "bytes": item.size, "chunks": buffer.total},
        )
        return item

    def _report_failure(self, buffer: FragmentBuffer, exc: Exception) -> None:
        self._stats["assembly_failed"] += 1
        self._logger.log_event(
            "assembly_failed",
            {"uuid": buffer.uuid, "type": buffer.type, "error": type(exc).__name__, "reason": str(exc)},
        )

    def ingest_many(self, lines: Iterable[str]) -> List[CompletedItem]:
        items = []
        for line in lines:
            item = self.ingest(line)
            if item is not None:
                items.append(item)
        return items

    def get_completed_item(self, uuid: str) -> CompletedItem | None:
        return self._completed.get(uuid)

    def get_completed_items_by_type(self, type: str) -> List[CompletedItem]:
        return [item for item in self._completed.values() if item.type == type]

    def completed_items(self) -> Dict[str, CompletedItem]:
        return dict(self._completed)

    def pending_uuids(self) -> List[str]:
        return list(self._pending)

    def pending_progress(self, uuid: str) -> Tuple[int, int] | None:
        buffer = self._pending.get(uuid)
        if buffer is None:
            return None
        return buffer.received_count, buffer.total

    def discard_pending(self, uuid: str) -> bool:
        return self._pending.pop(uuid, None) is not None

    def evict(self, uuid: str, forget: bool = False) -> CompletedItem | None:
        """Drop a completed item. With ``forget`` the uuid may be reassembled again."""
        if forget:
            self._finished.discard(uuid)
        return self._completed.pop(uuid, None)

    def clear_completed(self, forget: bool = False) -> int:
        count = len(self._completed)
        self._completed.clear()
        if forget:
            self._finished.clear()
        return count

    def stats(self) -> Dict[str, int]:
        stats = dict(self._stats)
        stats["pending"] = len(self._pending)
        stats["retained"] = len(self._completed)
        stats["finished"] = len(self._finished)
        return stats


def reassemble(lines: Iterable[str], logger: EventSink | None = None) -> List[CompletedItem]:
    return Reassembler(logger=logger).ingest_many(lines)
