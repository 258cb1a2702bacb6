"""
Merge registry for libloader.

Decides which declaration wins for each library: the highest version,
then the latest build time.
"""

from .merge_registry import MergeRegistry, OfferOutcome

__all__ = ["MergeRegistry", "OfferOutcome"]
