from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Deque, Iterable, TextIO

from richlog.sources.base import ILineSource


class FileLineSource(ILineSource):
    def __init__(self, path: str | Path, encoding: str = "utf-8") -> None:
        self._path = Path(path)
        if not self._path.exists():
            raise FileNotFoundError(self._path)
        self._fh: TextIO | None = self._path.open("r", encoding=encoding, errors="replace", newline="")

    @property
    def exhausted(self) -> bool:
        return self._fh is None

    def read_line(self, timeout_ms: int) -> str | None:
        if self._fh is None:
            return None
        line = self._fh.readline()
        if not line:
            self.close()
            return None
        return line.rstrip("\r\n")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None


class MemoryLineSource(ILineSource):
    def __init__(self, lines: Iterable[str]) -> None:
        self._lines: Deque[str] = deque(lines)
        self._closed = False

    def push(self, line: str) -> None:
        self._lines.append(line)

    @property
    def exhausted(self) -> bool:
        return self._closed or not self._lines

    def read_line(self, timeout_ms: int) -> str | None:
        if self._closed or not self._lines:
            return None
        return self._lines.popleft()

    def close(self) -> None:
        self._closed = True
