"""JSON result builders for the CLI and the web API."""

from .result_builder import file_statistics_to_json, hotspots_to_json, prepare_results, prepare_type_graph

__all__ = ["file_statistics_to_json", "hotspots_to_json", "prepare_results", "prepare_type_graph"]
