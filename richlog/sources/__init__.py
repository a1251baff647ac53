from richlog.sources.base import ILineSource
from richlog.sources.file import FileLineSource, MemoryLineSource
from richlog.sources.line_framing import LineFramer
from richlog.sources.uart import UartLineSource

__all__ = ["ILineSource", "FileLineSource", "MemoryLineSource", "LineFramer", "UartLineSource"]
