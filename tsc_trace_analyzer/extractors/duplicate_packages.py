"""
Duplicate package detection over node_modules install paths.
"""

import json
import os
from typing import Callable, Dict, List

from ..core.types import DuplicatedPackage

UNKNOWN_VERSION = 'unknown'


def read_package_version(package_path: str) -> str:
    """
    Read the `version` field of `<package_path>/package.json`.

    Returns:
        The version string, or "unknown" if the manifest is missing,
        unreadable or has no string version
    """
    manifest = os.path.join(package_path, 'package.json')
    try:
        with open(manifest, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError):
        return UNKNOWN_VERSION

    version = data.get('version') if isinstance(data, dict) else None
    return version if isinstance(version, str) else UNKNOWN_VERSION


def get_duplicate_packages(
    node_module_paths: Dict[str, List[str]],
    version_reader: Callable[[str], str] = read_package_version
) -> List[DuplicatedPackage]:
    """
    Report packages installed at two or more distinct paths.

    Args:
        node_module_paths: Output of get_node_module_paths()
        version_reader: Callable returning the version installed at a path

    Returns:
        List of {name, instances: [{path, version}]} in package order
    """
    duplicates: List[DuplicatedPackage] = []

    for name, paths in node_module_paths.items():
        if len(paths) < 2:
            continue
        instances = [{'path': path, 'version': version_reader(path)} for path in paths]
        duplicates.append({'name': name, 'instances': instances})

    return duplicates
