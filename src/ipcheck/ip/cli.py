"""
CIDR CLI commands.
"""

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ipcheck.errors import AddressError
from ipcheck.ip.core import CidrBlock
from ipcheck.query import check_overlap


def _block_rows(table: Table, label: str, text: str, block: CidrBlock) -> None:
    table.add_row(label, escape(text))
    table.add_row("  Network", str(block))
    table.add_row("  Expanded", f"{block.base.expanded()}/{block.prefix_length}")
    table.add_row("  Last Address", str(block.last))


@click.command()
@click.argument("network1")
@click.argument("network2")
@click.option("-v", "--verbose", is_flag=True, help="Explain how the result was reached")
@click.pass_context
def cidr(ctx, network1: str, network2: str, verbose: bool):
    """Check if two CIDR blocks overlap.

    Host bits beyond the prefix are ignored, so 10.1.2.3/8 is 10.0.0.0/8.

    Examples:
        ipcheck cidr 192.168.1.0/24 192.168.1.128/25
        ipcheck cidr 10.0.0.0/25 10.0.0.128/25
        ipcheck -v cidr 2001:db8::/32 2001:db8:abcd::/48
    """
    console = Console()
    verbose = verbose or ctx.find_root().params.get("verbose", False)

    try:
        result = check_overlap(network1, network2)
    except AddressError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    if verbose:
        table = Table(title="CIDR Overlap Check", show_header=False, box=None)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")

        _block_rows(table, "Network 1", network1, result.first)
        _block_rows(table, "Network 2", network2, result.second)
        table.add_row("", "")
        table.add_row("Family", result.family)
        if result.compared_bits is None:
            table.add_row("Compared Bits", "[dim]n/a (IPv4 and IPv6 never overlap)[/dim]")
        else:
            table.add_row("Compared Bits", f"{result.compared_bits} leading bits")

        console.print(table)
        console.print()

    if result.overlap:
        console.print(f"[yellow]Yes[/yellow] - {result.first} and {result.second} overlap")
    else:
        console.print(f"[green]No[/green] - {result.first} and {result.second} do not overlap")
