from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from richlog.config.settings import load_mapping
from richlog.plugins.handlers import (
    PayloadHandler,
    convert_command,
    convert_config,
    convert_generic,
    convert_image,
)
from richlog.plugins.views import PayloadView
from richlog.protocol.errors import UnknownPayloadType
from richlog.reassembly.fragments import CompletedItem

HANDLERS: Dict[str, PayloadHandler] = {
    "config": convert_config,
    "image": convert_image,
    "command": convert_command,
    "generic": convert_generic,
}

BUILTIN_DESCRIPTORS: Tuple[Dict[str, Any], ...] = (
    {
        "type": "config",
        "name": "Config",
        "description": "View structured configuration as a JSON tree",
        "icon": "settings",
        "file_extensions": [".json"],
        "mime_types": ["application/json"],
    },
    {
        "type": "image",
        "name": "Image",
        "description": "View embedded images",
        "color": "success",
        "bg_color": "bg-success",
        "icon": "image",
        "file_extensions": [".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"],
        "mime_types": ["image/png", "image/jpeg", "image/gif", "image/bmp", "image/webp"],
    },
    {
        "type": "command",
        "name": "Command",
        "description": "View command output as a terminal transcript",
        "color": "dark",
        "bg_color": "bg-dark",
        "icon": "terminal",
        "file_extensions": [".txt", ".log"],
        "mime_types": ["text/plain"],
    },
)


def _str_tuple(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class PluginInfo:
    type: str
    path: str
    name: str
    title: str
    description: str
    color: str = "primary"
    bg_color: str = "bg-primary"
    icon: str = "file"
    handler: str = "generic"
    file_extensions: Tuple[str, ...] = field(default_factory=tuple)
    mime_types: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PluginInfo":
        type_name = str(data.get("type") or "").strip()
        if not type_name:
            raise ValueError("plugin descriptor requires a type")
        name = str(data.get("name") or type_name)
        handler = str(data.get("handler") or (type_name if type_name in HANDLERS else "generic"))
        if handler not in HANDLERS:
            raise ValueError(f"unknown plugin handler: {handler}")
        return cls(
            type=type_name,
            path=str(data.get("path") or f"plugins/{type_name}/index.html"),
            name=name,
            title=str(data.get("title") or f"{name} viewer"),
            description=str(data.get("description") or f"View {type_name} data"),
            color=str(data.get("color") or "primary"),
            bg_color=str(data.get("bg_color") or data.get("bgColor") or "bg-primary"),
            icon=str(data.get("icon") or "file"),
            handler=handler,
            file_extensions=_str_tuple(data.get("file_extensions") or data.get("fileExtensions")),
            mime_types=_str_tuple(data.get("mime_types") or data.get("mimeTypes")),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "path": self.path,
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "color": self.color,
            "bg_color": self.bg_color,
            "icon": self.icon,
            "handler": self.handler,
            "file_extensions": list(self.file_extensions),
            "mime_types": list(self.mime_types),
        }


class PluginRegistry:
    """Maps payload types to viewer descriptors and view converters.

    Descriptors handed to the constructor are registered once, on first use or
    on an explicit :meth:`ensure_loaded`; :attr:`ready` tells whether that has
    happened. Registration is per instance, nothing is shared between
    registries.
    """

    def __init__(self, descriptors: Iterable[Mapping[str, Any]] | None = None) -> None:
        self._descriptors = [dict(item) for item in (descriptors or [])]
        self._plugins: Dict[str, PluginInfo] = {}
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    def ensure_loaded(self) -> "PluginRegistry":
        if self._ready:
            return self
        for data in self._descriptors:
            info = PluginInfo.from_dict(data)
            self._plugins[info.type] = info
        self._ready = True
        return self

    def register(
        self, info: PluginInfo | Mapping[str, Any], handler: str | None = None
    ) -> PluginInfo | None:
        self.ensure_loaded()
        if not isinstance(info, PluginInfo):
            info = PluginInfo.from_dict(info)
        if handler is not None:
            if handler not in HANDLERS:
                raise ValueError(f"unknown plugin handler: {handler}")
            info = replace(info, handler=handler)
        replaced = self._plugins.get(info.type)
        self._plugins[info.type] = info
        return replaced

    def unregister(self, type: str) -> PluginInfo | None:
        self.ensure_loaded()
        return self._plugins.pop(type, None)

    def is_type_known(self, type: str) -> bool:
        self.ensure_loaded()
        return type in self._plugins

    def get_plugin_info(self, type: str) -> PluginInfo | None:
        self.ensure_loaded()
        return self._plugins.get(type)

    def registered_types(self) -> List[str]:
        self.ensure_loaded()
        return list(self._plugins)

    def type_info(self) -> Dict[str, Dict[str, str]]:
        self.ensure_loaded()
        return {
            type_name: {
                "name": info.name,
                "color": info.color,
                "bg_color": info.bg_color,
                "icon": info.icon,
            }
            for type_name, info in self._plugins.items()
        }

    def convert(self, item: CompletedItem) -> PayloadView:
        info = self.get_plugin_info(item.type)
        if info is None:
            raise UnknownPayloadType(f"unsupported payload type: {item.type}")
        return HANDLERS[info.handler](item)


def load_plugin_descriptors(path: str | Path) -> List[Dict[str, Any]]:
    data = load_mapping(path)
    if isinstance(data, dict):
        data = data.get("plugins")
    if not isinstance(data, list):
        raise ValueError("plugin descriptor file must hold a list or a mapping with 'plugins'")
    for item in data:
        if not isinstance(item, dict):
            raise ValueError("plugin descriptors must be mappings")
    return [dict(item) for item in data]


def default_registry(extra: Iterable[Mapping[str, Any]] | None = None) -> PluginRegistry:
    descriptors: List[Mapping[str, Any]] = list(BUILTIN_DESCRIPTORS)
    descriptors.extend(extra or [])
    return PluginRegistry(descriptors)
