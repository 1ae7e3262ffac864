"""
CIDR overlap detection.

Two blocks of the same family overlap exactly when one network is a
prefix of the other: comparing the leading bits up to the shorter prefix
length decides it. Blocks of different families never overlap.
"""

from ipcheck.ip.core import CidrBlock, top_bits


def comparison_length(a: CidrBlock, b: CidrBlock) -> int | None:
    """Number of leading bits compared by overlaps(), None across families."""
    if a.version != b.version:
        return None
    return min(a.prefix_length, b.prefix_length)


def overlaps(a: CidrBlock, b: CidrBlock) -> bool:
    """Check if two CIDR blocks share at least one address."""
    m = comparison_length(a, b)
    if m is None:
        return False
    return top_bits(a.base, m) == top_bits(b.base, m)
