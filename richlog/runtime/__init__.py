from richlog.runtime.clock import Clock, FakeClock, RealClock
from richlog.runtime.logging import EventSink, JsonlLogger, MemoryLogger, NullLogger

__all__ = [
    "Clock",
    "RealClock",
    "FakeClock",
    "EventSink",
    "JsonlLogger",
    "MemoryLogger",
    "NullLogger",
]
