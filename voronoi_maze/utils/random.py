"""
Seed helpers for the maze LCG.

Seeds are folded into a 32-bit state the same way on every platform; the
fallbacks are only used when no usable seed is supplied.
"""

import os
import time


def fold_seed(seed: str) -> int:
    """
    Fold a seed string into an unsigned 32-bit integer.

    Each character is mixed in as ``acc = (acc * 31 + code) mod 2^32``.

    Args:
        seed: Seed string

    Returns:
        Folded 32-bit value (may be 0)
    """
    acc = 0
    # UTF-16 code units, so characters outside the BMP fold as two units
    data = seed.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        acc = (acc * 31 + code) & 0xFFFFFFFF
    return acc


def time_seed() -> int:
    """Nonzero 32-bit value derived from the current time in milliseconds."""
    return (int(time.time() * 1000) & 0xFFFFFFFF) or 1


def entropy_seed() -> int:
    """32-bit value from the OS entropy pool, for unseeded generation."""
    return int.from_bytes(os.urandom(4), "little")
