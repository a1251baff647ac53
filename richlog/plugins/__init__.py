from richlog.plugins.handlers import sniff_image_mime
from richlog.plugins.registry import (
    BUILTIN_DESCRIPTORS,
    PluginInfo,
    PluginRegistry,
    default_registry,
    load_plugin_descriptors,
)
from richlog.plugins.views import CommandView, ConfigView, GenericView, ImageView, PayloadView

__all__ = [
    "BUILTIN_DESCRIPTORS",
    "PluginInfo",
    "PluginRegistry",
    "default_registry",
    "load_plugin_descriptors",
    "sniff_image_mime",
    "PayloadView",
    "ConfigView",
    "ImageView",
    "CommandView",
    "GenericView",
]
