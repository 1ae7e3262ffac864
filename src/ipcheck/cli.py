"""
Command-line entry point for ipcheck.
"""

import click

from ipcheck import __version__
from ipcheck.crawler.cli import crawler, init_config, sources
from ipcheck.ip.cli import cidr
from ipcheck.logging_config import configure_logging


@click.group()
@click.version_option(__version__, prog_name="ipcheck")
@click.option("-v", "--verbose", is_flag=True, help="Show diagnostic details")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also log to this file")
def main(verbose: bool, debug: bool, log_file: str | None):
    """IP address analysis: CIDR overlap and crawler detection."""
    configure_logging(debug=debug, log_file=log_file)


main.add_command(cidr)
main.add_command(crawler)
main.add_command(sources)
main.add_command(init_config)


if __name__ == "__main__":
    main()
