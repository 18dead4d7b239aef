"""Vendor categorization.

Turns a vendor name into one of the user's categories through a fixed chain
of tiers (cache, memory, reasoning, web lookup, fallback). The chain always
terminates with a category; infrastructure failures propagate as errors.
"""

from .chain import CategorizationChain, build_chain
from .extraction import ExtractedExpense, extract_expense
from .strategies import CategorizationContext, CategorizationResult
from .vendor import extract_rough_vendor, normalize_vendor

__all__ = [
    "CategorizationChain",
    "CategorizationContext",
    "CategorizationResult",
    "ExtractedExpense",
    "build_chain",
    "extract_expense",
    "extract_rough_vendor",
    "normalize_vendor",
]
