from richlog.encoding.encoder import (
    COMMAND_TYPE,
    CONFIG_TYPE,
    IMAGE_TYPE,
    RichLogEncoder,
    encode,
    encode_command,
    encode_config,
    encode_image,
    encode_wire_lines,
    generate_uuid,
    payload_to_hex,
    serialize_config,
    split_hex,
)

__all__ = [
    "CONFIG_TYPE",
    "IMAGE_TYPE",
    "COMMAND_TYPE",
    "RichLogEncoder",
    "encode",
    "encode_wire_lines",
    "encode_config",
    "encode_image",
    "encode_command",
    "generate_uuid",
    "payload_to_hex",
    "serialize_config",
    "split_hex",
]
