"""
Core module - Graph runtime, protocols, configuration and image I/O.
"""

from glowstick.core.base import FrameFilter, FilterChain
from glowstick.core.graph import GraphError, Link, Node, NodeGraph
from glowstick.core.config import (
    Config,
    GlobalSettings,
    load_config,
    save_config,
    create_example_config,
    get_env_config,
    parse_overrides,
)
from glowstick.core.image import ImageProperties, LoadedImage, read_image, write_image

__all__ = [
    "FrameFilter",
    "FilterChain",
    "GraphError",
    "Link",
    "Node",
    "NodeGraph",
    "Config",
    "GlobalSettings",
    "load_config",
    "save_config",
    "create_example_config",
    "get_env_config",
    "parse_overrides",
    "ImageProperties",
    "LoadedImage",
    "read_image",
    "write_image",
]
