"""
Exception hierarchy for ipcheck.

Address errors are fatal to the command that raised them. Source errors
are collected per source while the crawler registry is built and only
reported, so one broken source never hides the others.
"""


class IPCheckError(Exception):
    """Base class for all ipcheck errors."""


# =============================================================================
# Address / CIDR parsing
# =============================================================================

class AddressError(IPCheckError, ValueError):
    """Raised when user supplied address text cannot be parsed."""

    def __init__(self, text: str, reason: str):
        self.text = text
        self.reason = reason
        super().__init__(f"{reason}: {text!r}")


class InvalidAddressFormat(AddressError):
    """Malformed IPv4 or IPv6 address."""

    def __init__(self, text: str, reason: str = "Invalid IP address format"):
        super().__init__(text, reason)


class InvalidCidrFormat(AddressError):
    """CIDR text without exactly one '/' separator."""

    def __init__(self, text: str, reason: str = "Invalid CIDR notation"):
        super().__init__(text, reason)


class InvalidPrefixLength(AddressError):
    """Prefix length that is not a number or is out of range for the family."""

    def __init__(self, text: str, reason: str = "Invalid prefix length"):
        super().__init__(text, reason)


# =============================================================================
# Crawler sources
# =============================================================================

class SourceError(IPCheckError):
    """Raised while loading a single crawler source."""

    kind = "source_error"

    def __init__(self, source_name: str, message: str):
        self.source_name = source_name
        self.message = message
        super().__init__(f"{source_name}: {message}")


class InvalidSourceDescriptor(SourceError):
    """A configured source entry is missing required fields."""

    kind = "invalid_descriptor"


class SourceFetchError(SourceError):
    """The raw data for a source could not be read or downloaded."""

    kind = "fetch_error"


class SourceParseError(SourceError):
    """The raw data for a source is not in the declared format."""

    kind = "parse_error"


class UnsupportedSourceFormat(SourceParseError):
    """The declared format has no parser."""

    kind = "unsupported_format"


class RegistryUnavailable(IPCheckError):
    """No crawler source could be loaded at all."""
