from __future__ import annotations

import time

from richlog.sources.base import ILineSource
from richlog.sources.line_framing import LineFramer


class UartLineSource(ILineSource):
    """
    Reads newline-terminated log text from a serial port.

    Devices that cannot write files can print wire lines on their console;
    this source feeds those lines to a reader. It never writes to the port.
    """

    def __init__(
        self,
        port: str,
        baudrate: int = 115200,
        encoding: str = "utf-8",
        max_line_bytes: int = 65536,
    ) -> None:
        try:
            import serial  # type: ignore
        except ImportError as exc:
            raise RuntimeError(
                "pyserial is required for UART sources. Install with `pip install -e .[uart]`."
            ) from exc

        self._serial = serial.Serial(port=port, baudrate=baudrate, timeout=0)
        self._framer = LineFramer(max_line_bytes=max_line_bytes, encoding=encoding)
        self._closed = False

    @property
    def exhausted(self) -> bool:
        return self._closed

    def _read_available(self) -> bytes:
        try:
            waiting = int(self._serial.in_waiting)
        except Exception:
            waiting = 0
        if waiting <= 0:
            return b""
        return self._serial.read(waiting)

    def read_line(self, timeout_ms: int) -> str | None:
        if self._closed:
            return None
        deadline = time.monotonic() + max(0, timeout_ms) / 1000.0
        while True:
            line = self._framer.pop()
            if line is not None:
                return line
            chunk = self._read_available()
            if chunk:
                self._framer.feed(chunk)
                continue
            if timeout_ms <= 0 or time.monotonic() >= deadline:
                return None
            time.sleep(0.001)

    def close(self) -> None:
        self._closed = True
        try:
            self._serial.close()
        except Exception:
            return None
