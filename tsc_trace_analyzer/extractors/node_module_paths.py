"""
Extraction of node_modules package install paths from findSourceFile events.
"""

import re
from typing import Dict, Iterable, List

from ..core.events import TraceEvent


class NodeModulePathExtractor:
    """Maps package names to the node_modules directories they were loaded from."""

    def __init__(self):
        """Initialize the package segment pattern (scoped and unscoped)."""
        self.package_pattern = re.compile(r'node_modules/((?:@[^/]+/)?[^/]+)')

    def extract(self, events: Iterable[TraceEvent]) -> Dict[str, List[str]]:
        """
        Collect package install paths from every findSourceFile event.

        A single file name can yield several matches when packages are nested
        (node_modules/a/node_modules/b/...). Each match records the file name
        prefix up to and including the package segment.

        Args:
            events: Validated trace events

        Returns:
            Dict mapping package name -> sorted unique paths, packages in
            first-seen order
        """
        packages: Dict[str, set] = {}

        for event in events:
            if event.name != 'findSourceFile':
                continue
            file_name = event.str_arg('fileName')
            if not file_name:
                continue

            for match in self.package_pattern.finditer(file_name):
                package_name = match.group(1)
                package_path = file_name[:match.end()]
                packages.setdefault(package_name, set()).add(package_path)

        return {name: sorted(paths) for name, paths in packages.items()}


def get_node_module_paths(events: Iterable[TraceEvent]) -> Dict[str, List[str]]:
    return NodeModulePathExtractor().extract(events)
