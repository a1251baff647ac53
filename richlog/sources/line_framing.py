from __future__ import annotations


class LineFramer:
    """
    Splits a byte stream into text lines.

    Lines end at LF; a trailing CR is stripped. A line longer than
    `max_line_bytes` is dropped up to its terminator, so one runaway line does
    not stall the stream. Undecodable bytes are replaced rather than raised.
    """

    def __init__(self, *, max_line_bytes: int = 65536, encoding: str = "utf-8") -> None:
        if max_line_bytes <= 0:
            raise ValueError("max_line_bytes must be > 0")
        self._max_line_bytes = int(max_line_bytes)
        self._encoding = encoding
        self._buf = bytearray()
        self._discarding = False
        self.dropped_lines = 0

    def feed(self, data: bytes) -> None:
        if data:
            self._buf.extend(data)

    def pop(self) -> str | None:
        while True:
            end = self._buf.find(b"\n")
            if end < 0:
                if len(self._buf) > self._max_line_bytes:
                    self._buf.clear()
                    if not self._discarding:
                        self._discarding = True
                        self.dropped_lines += 1
                return None
            raw = bytes(self._buf[:end])
            del self._buf[: end + 1]
            if self._discarding:
                self._discarding = False
                continue
            if len(raw) > self._max_line_bytes:
                self.dropped_lines += 1
                continue
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            return raw.decode(self._encoding, errors="replace")

    def flush(self) -> str | None:
        if not self._buf or self._discarding:
            self._buf.clear()
            self._discarding = False
            return None
        raw = bytes(self._buf)
        self._buf.clear()
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        return raw.decode(self._encoding, errors="replace")

    def buffered_bytes(self) -> int:
        return len(self._buf)
