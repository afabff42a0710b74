"""
Classification support components: response caching, in-flight request
de-duplication and manual learning.
"""

from .inflight import InFlightRegistry
from .learning import LearningWriter
from .response_cache import ResponseCache

__all__ = [
    "InFlightRegistry",
    "LearningWriter",
    "ResponseCache",
]
