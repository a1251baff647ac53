from __future__ import annotations

import re
from dataclasses import dataclass

from richlog.protocol.errors import NotRichLogLine

TAG = "RICHLOG"

# The tag may follow any prefix (timestamps, levels, ANSI colours) and the chunk
# may be followed by quotes or escapes; only a run into letters or digits is refused.
_WIRE_RE = re.compile(
    TAG + r":(?P<type>[^,]+),(?P<uuid>[^,]+),(?P<index>[0-9]+),(?P<total>[0-9]+),"
    r"(?P<chunk>[0-9a-fA-F]*)(?![0-9A-Za-z])"
)


@dataclass(frozen=True)
class WireLine:
    type: str
    uuid: str
    index: int
    total: int
    hex_chunk: str

    def format(self) -> str:
        return f"{TAG}:{self.type},{self.uuid},{self.index},{self.total},{self.hex_chunk.lower()}"

    @classmethod
    def parse(cls, line: str) -> "WireLine":
        match = _WIRE_RE.search(line)
        if match is None:
            raise NotRichLogLine("line does not match the wire grammar")
        index = int(match.group("index"))
        total = int(match.group("total"))
        if total < 1 or not (1 <= index <= total):
            raise NotRichLogLine(f"index {index} outside 1..{total}")
        return cls(
            type=match.group("type"),
            uuid=match.group("uuid"),
            index=index,
            total=total,
            hex_chunk=match.group("chunk"),
        )


def recognize_line(line: str) -> WireLine | None:
    if not isinstance(line, str) or TAG not in line:
        return None
    try:
        return WireLine.parse(line)
    except NotRichLogLine:
        return None
