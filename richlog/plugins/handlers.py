from __future__ import annotations

import base64
import json
from typing import Callable

from richlog.plugins.views import CommandView, ConfigView, GenericView, ImageView, PayloadView
from richlog.reassembly.fragments import CompletedItem

PayloadHandler = Callable[[CompletedItem], PayloadView]

_IMAGE_SIGNATURES = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"BM", "image/bmp"),
)


def sniff_image_mime(data: bytes) -> str:
    for signature, mime in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def convert_config(item: CompletedItem) -> ConfigView:
    text = item.text(errors="replace")
    try:
        return ConfigView(data=json.loads(text), text=text)
    except json.JSONDecodeError:
        return ConfigView(data=None, text=text, error="invalid JSON")


def convert_image(item: CompletedItem) -> ImageView:
    mime = sniff_image_mime(item.raw_bytes)
    encoded = base64.b64encode(item.raw_bytes).decode("ascii")
    return ImageView(mime_type=mime, data_uri=f"data:{mime};base64,{encoded}")


def convert_command(item: CompletedItem) -> CommandView:
    text = item.text(errors="replace")
    return CommandView(text=text, lines=tuple(text.split("\n")))


def convert_generic(item: CompletedItem) -> GenericView:
    return GenericView(type=item.type, text=item.text(errors="replace"))
