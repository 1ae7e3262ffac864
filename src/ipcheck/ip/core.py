"""
Core address model: IP addresses and CIDR blocks.

Addresses are stored as (version, integer value) pairs so that prefix
comparisons are plain bit arithmetic. Text parsing and rendering is
delegated to netaddr.
"""

from dataclasses import dataclass
from functools import total_ordering

from netaddr import IPAddress as NetaddrAddress, AddrFormatError, ipv6_verbose

from ipcheck.errors import InvalidAddressFormat, InvalidCidrFormat, InvalidPrefixLength


ADDRESS_BITS = {
    4: 32,
    6: 128,
}

PRIVATE_RANGES_V4 = [
    "10.0.0.0/8",
    "172.16.0.0/12",
    "192.168.0.0/16",
]


@total_ordering
@dataclass(frozen=True, eq=True)
class IpAddress:
    """An IPv4 or IPv6 address.

    Ordering is only defined between addresses of the same family.
    """
    version: int
    value: int

    def __post_init__(self):
        if self.version not in ADDRESS_BITS:
            raise ValueError(f"Unknown IP version: {self.version}")
        if not 0 <= self.value < (1 << ADDRESS_BITS[self.version]):
            raise ValueError(f"Value out of range for IPv{self.version}: {self.value}")

    @property
    def bits(self) -> int:
        return ADDRESS_BITS[self.version]

    @property
    def family(self) -> str:
        return f"IPv{self.version}"

    def __lt__(self, other: "IpAddress") -> bool:
        if not isinstance(other, IpAddress):
            return NotImplemented
        if self.version != other.version:
            raise TypeError(f"Cannot order {self.family} and {other.family} addresses")
        return self.value < other.value

    def to_netaddr(self) -> NetaddrAddress:
        return NetaddrAddress(self.value, self.version)

    def expanded(self) -> str:
        """Fully expanded form (zero padded IPv6 groups)."""
        if self.version == 6:
            return self.to_netaddr().format(dialect=ipv6_verbose)
        return str(self)

    def __str__(self) -> str:
        return str(self.to_netaddr())


@dataclass(frozen=True)
class CidrBlock:
    """A network block. The base address always has its host bits cleared."""
    base: IpAddress
    prefix_length: int

    def __post_init__(self):
        if not 0 <= self.prefix_length <= self.base.bits:
            raise InvalidPrefixLength(
                str(self.prefix_length),
                f"Prefix length out of range for {self.base.family} (0-{self.base.bits})",
            )
        masked = self.base.value & netmask(self.base.version, self.prefix_length)
        if masked != self.base.value:
            object.__setattr__(self, "base", IpAddress(self.base.version, masked))

    @property
    def version(self) -> int:
        return self.base.version

    @property
    def family(self) -> str:
        return self.base.family

    @property
    def num_addresses(self) -> int:
        return 1 << (self.base.bits - self.prefix_length)

    @property
    def last(self) -> IpAddress:
        return IpAddress(self.version, self.base.value + self.num_addresses - 1)

    @classmethod
    def host(cls, addr: IpAddress) -> "CidrBlock":
        """Single address block (/32 or /128)."""
        return cls(addr, addr.bits)

    def sort_key(self) -> tuple[int, int, int]:
        return (self.version, self.base.value, self.prefix_length)

    def __contains__(self, addr: IpAddress) -> bool:
        return contains(self, addr)

    def __str__(self) -> str:
        return f"{self.base}/{self.prefix_length}"


def netmask(version: int, prefix_length: int) -> int:
    """Integer netmask with the top prefix_length bits set."""
    bits = ADDRESS_BITS[version]
    return ((1 << prefix_length) - 1) << (bits - prefix_length)


def top_bits(addr: IpAddress, count: int) -> int:
    """The leading `count` bits of an address as an integer."""
    return addr.value >> (addr.bits - count)


def parse_address(text: str) -> IpAddress:
    """Parse dotted-decimal IPv4 or colon-hex IPv6 text.

    Legacy IPv4 short forms ("10.1") and IPv6 with an embedded dotted
    IPv4 tail ("::ffff:1.2.3.4") are rejected.
    """
    candidate = text.strip()
    if not candidate or "/" in candidate:
        raise InvalidAddressFormat(text)
    if "." not in candidate and ":" not in candidate:
        raise InvalidAddressFormat(text)
    if ":" in candidate and "." in candidate:
        raise InvalidAddressFormat(text, "Mixed IPv6/IPv4 notation is not supported")

    try:
        addr = NetaddrAddress(candidate)
    except (AddrFormatError, ValueError, TypeError):
        raise InvalidAddressFormat(text) from None

    return IpAddress(addr.version, int(addr))


def parse_cidr(text: str) -> CidrBlock:
    """Parse `<address>/<prefix_length>` into a masked CidrBlock.

    Host bits beyond the prefix are cleared rather than rejected, so
    "192.168.1.77/24" yields 192.168.1.0/24.
    """
    parts = text.strip().split("/")
    if len(parts) != 2:
        raise InvalidCidrFormat(text)

    address_text, prefix_text = parts
    addr = parse_address(address_text)

    prefix_text = prefix_text.strip()
    if not (prefix_text.isascii() and prefix_text.isdigit()):
        raise InvalidPrefixLength(text, "Prefix length is not a number")
    # Long digit strings are out of range without converting them
    significant = prefix_text.lstrip("0") or "0"
    prefix_length = int(significant) if len(significant) <= 3 else addr.bits + 1
    if prefix_length > addr.bits:
        raise InvalidPrefixLength(
            text, f"Prefix length out of range for {addr.family} (0-{addr.bits})"
        )

    return CidrBlock(addr, prefix_length)


def parse_range(text: str) -> CidrBlock:
    """Parse either a CIDR block or a bare address (as a host block)."""
    if "/" in text:
        return parse_cidr(text)
    return CidrBlock.host(parse_address(text))


def contains(block: CidrBlock, addr: IpAddress) -> bool:
    """Check if a block contains an address."""
    if block.version != addr.version:
        return False
    return top_bits(addr, block.prefix_length) == top_bits(block.base, block.prefix_length)


def is_private(addr: IpAddress) -> bool:
    """Check if an IPv4 address is in RFC1918 space."""
    if addr.version != 4:
        return False
    return any(contains(parse_cidr(r), addr) for r in PRIVATE_RANGES_V4)


def describe_address(addr: IpAddress) -> str:
    """Short address type description for verbose output."""
    ip = addr.to_netaddr()

    if addr.version == 4:
        if ip.is_loopback():
            return "IPv4 Loopback"
        if is_private(addr):
            return "IPv4 Private"
        if ip.is_multicast():
            return "IPv4 Multicast"
        if addr.value == 0xFFFFFFFF:
            return "IPv4 Broadcast"
        return "IPv4 Public"

    if ip.is_loopback():
        return "IPv6 Loopback"
    if ip.is_multicast():
        return "IPv6 Multicast"
    return "IPv6"
