"""
Parallel runner for the independent analysis passes.
"""

import os
from multiprocessing import Pool
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..extractors.node_module_paths import get_node_module_paths
from .depth_limits import create_depth_limits
from .hotspot_extractor import get_hotspots
from .treemap import build_treemap
from .type_graph import build_type_graph

# Task name -> pure function of a single picklable input
TASKS: Dict[str, Callable[[Any], Any]] = {
    'hotspots': get_hotspots,
    'depth_limits': create_depth_limits,
    'node_module_paths': get_node_module_paths,
    'treemap': build_treemap,
    'type_graph': build_type_graph,
}


def _run_task(args: Tuple[str, Any]) -> Tuple[str, Any]:
    """
    Run one analysis pass. Designed to run in a worker process.

    Args:
        args: Tuple of (task_name, task_input)

    Returns:
        Tuple of (task_name, result)
    """
    name, payload = args
    return name, TASKS[name](payload)


class ParallelAnalysisRunner:
    """Runs read-only analysis passes in parallel using multiprocessing."""

    def __init__(self, num_workers: Optional[int] = None):
        """
        Initialize parallel runner.

        Args:
            num_workers: Number of worker processes (default: CPU count)
        """
        self.num_workers = num_workers or os.cpu_count() or 4

    def run(self, work_items: List[Tuple[str, Any]], progress_callback=None) -> Dict[str, Any]:
        """
        Run every (task_name, task_input) pair and wait for all of them.

        Args:
            work_items: Tasks to run; names must be keys of TASKS
            progress_callback: Optional callback(completed, total) for progress updates

        Returns:
            Dictionary mapping task_name -> result
        """
        for name, _ in work_items:
            if name not in TASKS:
                raise KeyError(f"Unknown analysis task '{name}'")

        task_count = len(work_items)

        if task_count <= 1 or self.num_workers <= 1:
            return self._run_sequential(work_items, progress_callback)

        results = {}
        completed = 0
        effective_workers = min(self.num_workers, task_count)

        with Pool(processes=effective_workers) as pool:
            for name, result in pool.imap_unordered(_run_task, work_items, chunksize=1):
                results[name] = result
                completed += 1
                if progress_callback:
                    progress_callback(completed, task_count)

        return results

    def _run_sequential(self, work_items: List[Tuple[str, Any]], progress_callback=None) -> Dict[str, Any]:
        """
        Fallback sequential execution for a single task or single worker.
        """
        results = {}
        total = len(work_items)

        for completed, item in enumerate(work_items, 1):
            name, result = _run_task(item)
            results[name] = result
            if progress_callback:
                progress_callback(completed, total)

        return results
