from __future__ import annotations


class RichLogError(ValueError):
    pass


class NotRichLogLine(RichLogError):
    pass


class FragmentMismatch(RichLogError):
    pass


class TypeMismatch(FragmentMismatch):
    pass


class TotalMismatch(FragmentMismatch):
    pass


class DuplicateChunkIndex(RichLogError):
    pass


class MissingChunk(RichLogError):
    pass


class MalformedHex(RichLogError):
    pass


class InvalidPayloadKind(RichLogError, TypeError):
    pass


class UnknownPayloadType(RichLogError):
    pass
