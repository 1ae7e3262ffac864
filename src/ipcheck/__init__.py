"""
ipcheck - IP address analysis utilities

Checks whether two CIDR blocks overlap and whether an address belongs
to a known web crawler, using bundled crawler range lists plus any
user-configured sources.
"""

__version__ = "0.1.0"
