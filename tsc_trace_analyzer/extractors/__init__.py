"""Data extraction utilities for trace events."""

from .node_module_paths import NodeModulePathExtractor, get_node_module_paths
from .duplicate_packages import get_duplicate_packages, read_package_version

__all__ = [
    "NodeModulePathExtractor",
    "get_node_module_paths",
    "get_duplicate_packages",
    "read_package_version",
]
