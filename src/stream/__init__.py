"""Lazy sequence engine."""

from stream.growing import GrowingSource
from stream.sequence import CachedSequence, ResumableSequence, Sequence

__all__ = ["CachedSequence", "GrowingSource", "ResumableSequence", "Sequence"]
