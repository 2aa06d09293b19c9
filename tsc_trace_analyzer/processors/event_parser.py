"""
Validation of raw trace records into typed trace events.
"""

from typing import Any, Dict, Iterable, List

from ..core.errors import TraceParseError
from ..core.events import (
    ARRAY, BOOLEAN, NUMBER, POSITIVE, PRESENT, STRING, TYPE_IDS, VARIANCES,
    EVENT_SCHEMAS, EventPhase, EventScope, TraceEvent,
)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class TraceEventParser:
    """Validates raw trace.json records against the fixed event schemas."""

    def parse(self, records: Iterable[Dict]) -> List[TraceEvent]:
        """
        Parse every record, aborting on the first invalid one.

        Args:
            records: Raw trace records (as loaded from trace.json)

        Returns:
            List of TraceEvent in input order

        Raises:
            TraceParseError: If any record does not match its event schema
        """
        events = []
        for index, record in enumerate(records):
            try:
                events.append(self.parse_record(record))
            except TraceParseError as e:
                raise TraceParseError(str(e), index) from None
        return events

    def parse_record(self, record: Dict) -> TraceEvent:
        """
        Validate a single record and build its TraceEvent.

        Raises:
            TraceParseError: If the record does not match its event schema
        """
        if not isinstance(record, dict):
            raise TraceParseError("event must be an object")

        name = record.get('name')
        if not isinstance(name, str):
            raise TraceParseError("name must be a string")
        schema = EVENT_SCHEMAS.get(name)
        if schema is None:
            raise TraceParseError(f"Unknown event name '{name}'")

        for key in ('pid', 'tid'):
            if not _is_positive_int(record.get(key)):
                raise TraceParseError(f"{key} must be a positive integer")
        ts = record.get('ts')
        if not _is_number(ts) or ts < 0:
            raise TraceParseError("ts must be a non-negative number")

        try:
            ph = EventPhase(record.get('ph'))
        except ValueError:
            raise TraceParseError(f"{name} has unknown phase {record.get('ph')!r}") from None
        if ph not in schema.phases:
            raise TraceParseError(f"{name} cannot have phase '{ph.value}'")

        cat = record.get('cat')
        if cat != schema.cat:
            raise TraceParseError(f"{name} cat must be '{schema.cat}'")

        dur = record.get('dur')
        if dur is not None and not _is_number(dur):
            raise TraceParseError(f"{name} dur must be a number")
        if ph == EventPhase.COMPLETE and dur is None:
            raise TraceParseError(f"{name} must have dur")

        scope = None
        if 's' in record:
            scope = EventScope.parse(record['s'])
            if scope is None:
                raise TraceParseError(f"{name} has invalid scope {record['s']!r}")
        if schema.requires_scope and scope is None:
            raise TraceParseError(f"{name} requires scope 's'")

        args = record.get('args', {})
        if not isinstance(args, dict):
            raise TraceParseError("args must be an object")
        for key, kind in schema.args.items():
            if key not in args:
                raise TraceParseError(f"args.{key} is missing")
            self._check_arg(name, key, kind, args[key])
        for key, kind in schema.optional_args.items():
            if key in args:
                self._check_arg(name, key, kind, args[key])

        return TraceEvent(
            name=name,
            cat=cat,
            ph=ph,
            pid=record['pid'],
            tid=record['tid'],
            ts=float(ts),
            dur=float(dur) if dur is not None else None,
            scope=scope,
            args=args,
        )

    @staticmethod
    def _check_arg(name: str, key: str, kind: str, value: Any) -> None:
        if kind == STRING and not isinstance(value, str):
            raise TraceParseError(f"{name} args.{key} must be a string")
        if kind == NUMBER and not _is_number(value):
            raise TraceParseError(f"{name} args.{key} must be a number")
        if kind == POSITIVE and not (_is_number(value) and value > 0):
            raise TraceParseError(f"{name} args.{key} must be a positive number")
        if kind == BOOLEAN and not isinstance(value, bool):
            raise TraceParseError(f"{name} args.{key} must be a boolean")
        if kind == ARRAY and not isinstance(value, list):
            raise TraceParseError(f"{name} args.{key} must be an array")
        if kind == TYPE_IDS:
            if not isinstance(value, list) or not value:
                raise TraceParseError(f"{name} args.{key} must be a non-empty array")
            if not all(_is_number(v) for v in value):
                raise TraceParseError(f"{name} args.{key} entries must be numbers")
        if kind == VARIANCES:
            variances = value.get('variances') if isinstance(value, dict) else None
            if not isinstance(variances, list) or not all(isinstance(v, str) for v in variances):
                raise TraceParseError(f"{name} args.{key}.variances must be an array of strings")
        # PRESENT only needs the key to exist


def parse_trace_events(records: Iterable[Dict]) -> List[TraceEvent]:
    """Parse raw trace records with the default parser."""
    return TraceEventParser().parse(records)
