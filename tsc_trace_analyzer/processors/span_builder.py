"""
Span reconstruction and pruned span-tree assembly for trace events.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ..core.errors import UnmatchedEndError
from ..core.events import EventPhase, TraceEvent
from ..core.types import AnalyzeTraceOptions

ROOT_INDEX = 0


@dataclass
class Span:
    """
    A reconstructed time interval.

    `event` is None only for the synthetic root. `children` holds indices
    into the owning SpanTree's arena.
    """
    event: Optional[TraceEvent]
    start: float
    end: float
    children: List[int] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.end - self.start

    @property
    def is_root(self) -> bool:
        return self.event is None


@dataclass
class ParseResult:
    """Flat spans plus the Begin events still pending at end of log."""
    spans: List[Span]
    unclosed_stack: List[TraceEvent]
    first_span_start: float
    last_span_end: float


@dataclass
class SpanTree:
    """Arena of spans; index 0 is the root sentinel."""
    spans: List[Span]

    @property
    def root(self) -> Span:
        return self.spans[ROOT_INDEX]

    def children_of(self, index: int) -> List[int]:
        """Arena indices of the direct children of `index`, in start order."""
        return list(self.spans[index].children)

    def walk(self, index: int = ROOT_INDEX, depth: int = 0) -> Iterator[tuple]:
        """Yield (depth, span) pairs in pre-order."""
        stack = [(index, depth)]
        while stack:
            i, d = stack.pop()
            span = self.spans[i]
            yield d, span
            for child in reversed(self.children_of(i)):
                stack.append((child, d + 1))

    def __len__(self) -> int:
        return len(self.spans)


def create_spans(events: List[TraceEvent]) -> ParseResult:
    """
    Convert a flat event sequence into spans.

    Begin events are pushed onto a single global pending stack and matched with
    the next End event. Complete events become spans directly. Instant and
    metadata events do not produce spans.

    Args:
        events: Validated trace events in log order

    Returns:
        ParseResult with closed spans and still-pending Begin events

    Raises:
        UnmatchedEndError: If an End event arrives with no pending Begin
    """
    unclosed_stack: List[TraceEvent] = []
    spans: List[Span] = []
    last_observed = None

    for index, event in enumerate(events):
        if last_observed is None or event.ts > last_observed:
            last_observed = event.ts

        if event.ph == EventPhase.BEGIN:
            unclosed_stack.append(event)
        elif event.ph == EventPhase.END:
            if not unclosed_stack:
                raise UnmatchedEndError(event.name, event.ts, index)
            begin_event = unclosed_stack.pop()
            spans.append(Span(begin_event, begin_event.ts, event.ts))
        elif event.ph == EventPhase.COMPLETE and event.dur is not None:
            spans.append(Span(event, event.ts, event.ts + event.dur))

    if spans:
        first_span_start = min(span.start for span in spans)
        last_span_end = max(span.end for span in spans)
        last_span_end = max(last_span_end, last_observed)
    else:
        first_span_start = 0.0
        last_span_end = last_observed if last_observed is not None else 0.0

    return ParseResult(
        spans=spans,
        unclosed_stack=unclosed_stack,
        first_span_start=first_span_start,
        last_span_end=last_span_end,
    )


def unterminated_events(parse_result: ParseResult) -> List[TraceEvent]:
    """Pending Begin events, most recently opened first."""
    return list(reversed(parse_result.unclosed_stack))


def unterminated_spans(parse_result: ParseResult) -> List[Span]:
    """Synthetic spans for pending Begins, stretched to the last observed end."""
    end = parse_result.last_span_end
    return [Span(event, event.ts, max(end, event.ts)) for event in unterminated_events(parse_result)]


def create_span_tree(parse_result: ParseResult, options: AnalyzeTraceOptions) -> SpanTree:
    """
    Assemble the pruned span tree.

    Spans are sorted by start time (stable, so equal starts keep emission
    order) and attached under the innermost ancestor that is still open. A span
    survives only if it is at least `force_millis` long or covers at least
    `min_span_parent_percentage` of its parent. Rejected spans are not pushed,
    so nothing nested inside them can attach through them.

    Args:
        parse_result: Output of create_spans()
        options: Analysis options holding the significance floors

    Returns:
        SpanTree whose root covers all spans
    """
    spans = parse_result.spans + unterminated_spans(parse_result)
    spans = sorted(spans, key=lambda span: span.start)

    if spans:
        root_start = spans[0].start
        root_end = max(span.end for span in spans)
    else:
        root_start = root_end = 0.0

    arena = [Span(None, root_start, root_end)]
    ancestors = [ROOT_INDEX]
    threshold_duration = options.force_millis * 1000

    for span in spans:
        # Pop ancestors that closed before this span started; root stays
        while len(ancestors) > 1 and arena[ancestors[-1]].end <= span.start:
            ancestors.pop()

        parent = arena[ancestors[-1]]
        is_above_threshold = span.duration >= threshold_duration
        is_significant_portion = span.duration >= parent.duration * options.min_span_parent_percentage

        if is_above_threshold or is_significant_portion:
            node = Span(span.event, span.start, span.end)
            arena.append(node)
            index = len(arena) - 1
            parent.children.append(index)
            ancestors.append(index)

    return SpanTree(arena)
