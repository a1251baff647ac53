from richlog.protocol.errors import (
    DuplicateChunkIndex,
    FragmentMismatch,
    InvalidPayloadKind,
    MalformedHex,
    MissingChunk,
    NotRichLogLine,
    RichLogError,
    TotalMismatch,
    TypeMismatch,
    UnknownPayloadType,
)
from richlog.protocol.hexcodec import bytes_to_hex, hex_to_bytes, hex_to_text, validate_hex
from richlog.protocol.wire import TAG, WireLine, recognize_line

__all__ = [
    "TAG",
    "WireLine",
    "recognize_line",
    "bytes_to_hex",
    "hex_to_bytes",
    "hex_to_text",
    "validate_hex",
    "RichLogError",
    "NotRichLogLine",
    "FragmentMismatch",
    "TypeMismatch",
    "TotalMismatch",
    "DuplicateChunkIndex",
    "MissingChunk",
    "MalformedHex",
    "InvalidPayloadKind",
    "UnknownPayloadType",
]
