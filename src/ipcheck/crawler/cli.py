"""
Crawler CLI commands.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ipcheck.config import get_settings
from ipcheck.crawler.registry import RangeRegistry
from ipcheck.crawler.sources import filter_sources, get_all_sources, write_sample_config
from ipcheck.errors import AddressError, RegistryUnavailable
from ipcheck.ip.core import describe_address
from ipcheck.query import check_crawler


def _is_verbose(ctx: click.Context, verbose: bool) -> bool:
    return verbose or ctx.find_root().params.get("verbose", False)


def _print_load_outcomes(console: Console, registry: RangeRegistry) -> None:
    table = Table(title="Crawler Sources", box=None)
    table.add_column("Source", style="white")
    table.add_column("Status", style="white", no_wrap=True)
    table.add_column("Ranges", style="white", justify="right", no_wrap=True)

    for range_set in registry.range_sets:
        table.add_row(
            escape(range_set.source_name),
            "[green]Loaded[/green]",
            f"{len(range_set):,} ({range_set.count(4)} v4, {range_set.count(6)} v6)",
        )
    for failure in registry.failures:
        table.add_row(
            escape(failure.source_name),
            f"[red]Failed ({failure.kind})[/red]",
            "-",
        )

    console.print(table)

    for failure in registry.failures:
        console.print(f"[yellow]Warning:[/yellow] {escape(str(failure.error))}")


@click.command()
@click.argument("ip_address")
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False),
              help="Additional sources file (default: additional_crawler_sources.json)")
@click.option("--live", is_flag=True, help="Fetch built-in lists from their published URLs")
@click.option("--timeout", type=float, help="Per-source fetch timeout in seconds")
@click.option("-v", "--verbose", is_flag=True, help="Show address details and source outcomes")
@click.pass_context
def crawler(ctx, ip_address: str, config_path: str | None, live: bool,
            timeout: float | None, verbose: bool):
    """Check if an IP address belongs to a known web crawler.

    Examples:
        ipcheck crawler 66.249.66.1
        ipcheck crawler 8.8.8.8 --config my_sources.json
        ipcheck -v crawler 2001:4860:4801:10::1 --live
    """
    console = Console()
    verbose = _is_verbose(ctx, verbose)

    try:
        with console.status("[cyan]Loading crawler sources...[/cyan]"):
            result = check_crawler(
                ip_address,
                config_path=config_path,
                live=live,
                timeout=timeout,
            )
    except AddressError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)
    except RegistryUnavailable as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    registry = result.registry

    if verbose:
        addr = result.address
        table = Table(title=f"IP Address: {escape(ip_address)}", show_header=False, box=None)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Address", str(addr))
        table.add_row("Expanded", addr.expanded())
        table.add_row("Type", describe_address(addr))
        console.print(table)
        console.print()
        _print_load_outcomes(console, registry)
        console.print()
    elif registry.failures:
        console.print(
            f"[dim]{len(registry.failures)} source(s) failed to load, "
            f"use -v for details[/dim]"
        )

    if result.match:
        console.print(
            f"[yellow]Yes[/yellow] - {result.address} is a crawler IP "
            f"({escape(result.match.source_name)})"
        )
        if verbose:
            console.print(f"[dim]Matched range: {result.match.block}[/dim]")
    else:
        console.print(f"[green]No[/green] - {result.address} is not a known crawler IP")
        if verbose:
            console.print(
                f"[dim]Checked {registry.total_ranges:,} ranges from "
                f"{registry.sources_loaded} source(s)[/dim]"
            )


@click.command()
@click.option("-n", "--name", "name_filter", help="Only sources whose name contains this text")
@click.option("-c", "--config", "config_path", type=click.Path(dir_okay=False),
              help="Additional sources file (default: additional_crawler_sources.json)")
@click.option("-v", "--verbose", is_flag=True, help="Show URL, format and description")
@click.pass_context
def sources(ctx, name_filter: str | None, config_path: str | None, verbose: bool):
    """List the configured crawler IP sources.

    Examples:
        ipcheck sources
        ipcheck sources --name googlebot -v
    """
    console = Console()
    verbose = _is_verbose(ctx, verbose)

    path = config_path or get_settings().sources_path
    all_sources, config = get_all_sources(path)

    if config.found:
        console.print(f"[dim]Loaded {len(config.sources)} additional source(s) from {path}[/dim]")
    else:
        console.print(f"[dim]No additional sources file found at {path}[/dim]")
    for failure in config.failures:
        console.print(f"[yellow]Warning:[/yellow] {escape(str(failure.error))}")

    selected = filter_sources(all_sources, name_filter) if name_filter else all_sources
    if not selected:
        console.print(f"[yellow]No sources match {escape(name_filter or '')!r}[/yellow]")
        return

    for index, source in enumerate(selected, start=1):
        origin = "built-in" if source.is_builtin else "configured"
        console.print(f"{index}. {escape(source.name)} [dim]({origin})[/dim]")
        if verbose:
            console.print(f"   URL: {escape(source.url)}")
            console.print(f"   Format: {escape(source.format)}")
            console.print(f"   Description: {escape(source.description)}")
            console.print()


@click.command("init-config")
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(path: str | None, force: bool):
    """Write a sample additional crawler sources file.

    Examples:
        ipcheck init-config
        ipcheck init-config my_sources.json --force
    """
    console = Console()
    target = Path(path) if path else get_settings().sources_path

    try:
        written = write_sample_config(target, overwrite=force)
    except FileExistsError:
        console.print(f"[red]Error:[/red] {target} already exists (use --force to overwrite)")
        raise SystemExit(1)
    except OSError as e:
        console.print(f"[red]Error:[/red] Cannot write {target}: {e}")
        raise SystemExit(1)

    console.print(f"[green]Wrote sample sources file to {written}[/green]")
