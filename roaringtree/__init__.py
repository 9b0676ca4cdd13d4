"""Compressed sets of 32-bit and 64-bit unsigned integers with set algebra and serialization."""

__version__ = "0.1.0"
__all__ = ["bitmap", "multiops", "partitions", "serialization", "treemap", "util"]