"""
Hotspot extraction from the pruned span tree.
"""

import math
import posixpath
from typing import Dict, List, Optional

from ..core.types import HotSpot
from .span_builder import ROOT_INDEX, Span, SpanTree


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_path(path: Optional[str]) -> Optional[str]:
    # normpath('') is '.', matching how an empty path prints elsewhere
    if path is None:
        return None
    return posixpath.normpath(path)


class HotspotExtractor:
    """Turns a span tree into a ranked forest of labeled frames."""

    def get_hotspots(self, span_tree: SpanTree) -> List[HotSpot]:
        """
        Walk the tree and return hotspot frames, slowest first at every level.

        Only checkSourceFile, structuredTypeRelatedTo, getVariancesWorker,
        checkExpression and checkVariableDeclaration spans produce frames. Frames
        found below any other span are spliced into that span's parent.

        The walk is a post-order over an explicit stack, so tree depth is not
        bounded by the interpreter's recursion limit.

        Args:
            span_tree: Output of create_span_tree()

        Returns:
            List of top-level HotSpot frames
        """
        # index -> frames produced by that subtree, held until the parent is finished
        frames: Dict[int, List[HotSpot]] = {}
        # (index, current_file, children sorted slow to fast once expanded)
        stack = [(ROOT_INDEX, None, None)]

        while stack:
            index, current_file, sorted_children = stack.pop()
            span = span_tree.spans[index]

            if sorted_children is None:
                event = span.event
                if event is not None and event.cat == 'check':
                    path = event.str_arg('path')
                    if path:
                        current_file = path

                # Sort slow to fast
                sorted_children = sorted(
                    span_tree.children_of(index),
                    key=lambda i: -span_tree.spans[i].duration
                )
                stack.append((index, current_file, sorted_children))
                for child in reversed(sorted_children):
                    stack.append((child, current_file, None))
                continue

            children: List[HotSpot] = []
            for child in sorted_children:
                children.extend(frames.pop(child))

            hot_frame = None
            if not span.is_root:
                hot_frame = self.make_hot_frame(span, children, current_file)
            frames[index] = [hot_frame] if hot_frame is not None else children

        return frames.pop(ROOT_INDEX)

    @staticmethod
    def make_hot_frame(
        span: Span,
        children: List[HotSpot],
        current_file: Optional[str] = None
    ) -> Optional[HotSpot]:
        """
        Build the frame for a recognized span kind, or None for any other kind.

        Args:
            span: Span to describe
            children: Frames already extracted from the span's subtree
            current_file: Path of the nearest enclosing check span, if any
        """
        event = span.event
        if event is None:
            return None

        time_ms = round_half_up(span.duration / 1000)

        if event.name == 'checkSourceFile':
            path = normalize_path(event.str_arg('path'))
            return {
                'description': f"Check file {path}",
                'time_ms': time_ms,
                'path': path,
                'types': None,
                'type_trees': None,
                'children': children,
            }

        if event.name == 'structuredTypeRelatedTo':
            source_id = int(event.num_arg('sourceId', -1))
            target_id = int(event.num_arg('targetId', -1))
            return {
                'description': f"Compare types {source_id} and {target_id}",
                'time_ms': time_ms,
                'path': None,
                'types': [source_id, target_id],
                'type_trees': None,
                'children': children,
            }

        if event.name == 'getVariancesWorker':
            type_id = int(event.num_arg('id', -1))
            return {
                'description': f"Determine variance of type {type_id}",
                'time_ms': time_ms,
                'path': None,
                'types': [type_id],
                'type_trees': None,
                'children': children,
            }

        if event.name in ('checkExpression', 'checkVariableDeclaration'):
            return {
                'description': event.name,
                'time_ms': time_ms,
                'path': normalize_path(event.str_arg('path') or current_file),
                'types': None,
                'type_trees': None,
                'children': children,
            }

        return None


def count_frames(hotspots: List[HotSpot]) -> int:
    """Total number of frames in a hotspot forest."""
    total = 0
    stack = list(hotspots)
    while stack:
        frame = stack.pop()
        total += 1
        stack.extend(frame['children'])
    return total


def get_hotspots(span_tree: SpanTree) -> List[HotSpot]:
    return HotspotExtractor().get_hotspots(span_tree)
