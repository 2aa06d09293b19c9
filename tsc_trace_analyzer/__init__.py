"""
TSC Trace Analyzer - TypeScript Compiler Trace Analysis Tool
"""

__version__ = "1.0.0"

from .core.analyzer import TraceAnalyzer
from .core.errors import TraceAnalysisError
from .core.types import AnalyzeTraceOptions

__all__ = ["TraceAnalyzer", "TraceAnalysisError", "AnalyzeTraceOptions"]
