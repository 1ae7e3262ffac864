"""
IP/CIDR Module

Address and CIDR block model plus the overlap check.
"""

from ipcheck.ip.core import (
    IpAddress,
    CidrBlock,
    parse_address,
    parse_cidr,
    parse_range,
    contains,
    describe_address,
)
from ipcheck.ip.overlap import overlaps, comparison_length

__all__ = [
    "IpAddress",
    "CidrBlock",
    "parse_address",
    "parse_cidr",
    "parse_range",
    "contains",
    "describe_address",
    "overlaps",
    "comparison_length",
]
