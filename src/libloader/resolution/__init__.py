"""
Resolution loop for libloader.
"""

from .assembler import ResultAssembler
from .engine import ResolutionEngine, ResolutionResult, ResolutionState, run_all

__all__ = [
    "ResolutionEngine",
    "ResolutionResult",
    "ResolutionState",
    "ResultAssembler",
    "run_all",
]
