"""
trace.json / types.json loading using streaming parser.
"""

import os
from typing import Dict, List

import ijson

from ..core.type_descriptors import with_placeholder

TRACE_JSON_FILENAME = 'trace.json'
TYPES_JSON_FILENAME = 'types.json'


def _json_prefix(f) -> str:
    """
    Pick the ijson prefix for a trace file.

    The compiler writes a bare array; the Chrome trace format also allows an
    object holding the array under `traceEvents`.
    """
    head = f.read(1024).lstrip()
    f.seek(0)
    if head.startswith(b'{'):
        return 'traceEvents.item'
    return 'item'


class TraceFileProcessor:
    """Loads compiler trace output files using streaming parser."""

    def __init__(self, verbose: bool = True):
        """
        Args:
            verbose: If False, suppresses progress output
        """
        self.verbose = verbose

    def _log(self, message: str):
        if self.verbose:
            print(message)

    def load_trace_events(self, file_path: str) -> List[Dict]:
        """
        Read raw trace records from a trace.json file.

        Args:
            file_path: Path to trace.json

        Returns:
            List of raw event records in file order
        """
        records = []

        self._log(f"Processing {file_path}...")

        with open(file_path, 'rb') as f:
            parser = ijson.items(f, _json_prefix(f), use_float=True)

            for record in parser:
                records.append(record)
                if len(records) % 100000 == 0:
                    self._log(f"  Read {len(records)} events...")

        self._log(f"Completed reading file: {len(records)} events found.")

        return records

    def load_types(self, file_path: str) -> List[Dict]:
        """
        Read raw type descriptors from a types.json file.

        A placeholder record is inserted at index 0 so list positions line up
        with type ids.

        Args:
            file_path: Path to types.json

        Returns:
            List of raw type records, index 0 being the placeholder
        """
        records = []

        self._log(f"Processing {file_path}...")

        with open(file_path, 'rb') as f:
            for record in ijson.items(f, 'item', use_float=True):
                records.append(record)
                if len(records) % 100000 == 0:
                    self._log(f"  Read {len(records)} types...")

        self._log(f"Completed reading file: {len(records)} types found.")

        return with_placeholder(records)

    @staticmethod
    def find_trace_files(dir_path: str) -> Dict[str, str]:
        """
        Locate trace.json and types.json inside a trace output directory.

        Returns:
            Dict with 'trace' and, when present, 'types' file paths

        Raises:
            FileNotFoundError: If the directory has no trace.json
        """
        trace_path = os.path.join(dir_path, TRACE_JSON_FILENAME)
        if not os.path.isfile(trace_path):
            raise FileNotFoundError(f"No {TRACE_JSON_FILENAME} found in {dir_path}")

        files = {'trace': trace_path}
        types_path = os.path.join(dir_path, TYPES_JSON_FILENAME)
        if os.path.isfile(types_path):
            files['types'] = types_path
        return files
