from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from richlog.protocol.errors import (
    DuplicateChunkIndex,
    MissingChunk,
    TotalMismatch,
    TypeMismatch,
)
from richlog.protocol.hexcodec import hex_to_bytes
from richlog.protocol.wire import WireLine


@dataclass(frozen=True)
class CompletedItem:
    type: str
    uuid: str
    raw_bytes: bytes

    @property
    def size(self) -> int:
        return len(self.raw_bytes)

    def text(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        return self.raw_bytes.decode(encoding, errors)

    def hex(self) -> str:
        return self.raw_bytes.hex()


@dataclass
class FragmentBuffer:
    """Chunks received so far for one correlation id.

    ``type`` and ``total`` are pinned by the first line seen; ``chunks`` is keyed
    by 1-based index so arrival order does not matter.
    """

    uuid: str
    type: str
    total: int
    chunks: Dict[int, str] = field(default_factory=dict)

    @classmethod
    def start(cls, line: WireLine) -> "FragmentBuffer":
        return cls(uuid=line.uuid, type=line.type, total=line.total)

    @property
    def received_count(self) -> int:
        return len(self.chunks)

    def accept(self, line: WireLine) -> None:
        if line.type != self.type:
            raise TypeMismatch(f"type {line.type!r} does not match {self.type!r}")
        if line.total != self.total:
            raise TotalMismatch(f"total {line.total} does not match {self.total}")

    def add(self, index: int, hex_chunk: str) -> None:
        if not (1 <= index <= self.total):
            raise ValueError(f"index {index} outside 1..{self.total}")
        if index in self.chunks:
            raise DuplicateChunkIndex(f"index {index} already received")
        self.chunks[index] = hex_chunk

    def is_complete(self) -> bool:
        return self.received_count == self.total

    def missing_indices(self) -> List[int]:
        return [i for i in range(1, self.total + 1) if i not in self.chunks]

    def assemble(self) -> str:
        missing = self.missing_indices()
        if missing:
            raise MissingChunk(f"missing chunk indices {missing}")
        return "".join(self.chunks[i] for i in range(1, self.total + 1))

    def to_item(self) -> CompletedItem:
        return CompletedItem(type=self.type, uuid=self.uuid, raw_bytes=hex_to_bytes(self.assemble()))
