"""
Text processing module for the grocery classifier.
"""

from .normalizer import DIACRITIC_FOLDING, normalize

__all__ = ["DIACRITIC_FOLDING", "normalize"]
