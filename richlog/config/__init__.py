from richlog.config.settings import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_UUID_BYTES,
    EncoderSpec,
    LoggingSpec,
    RichLogConfig,
    SourceSpec,
    load_config,
    load_mapping,
    save_config,
)

__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_UUID_BYTES",
    "RichLogConfig",
    "EncoderSpec",
    "LoggingSpec",
    "SourceSpec",
    "load_config",
    "load_mapping",
    "save_config",
]
