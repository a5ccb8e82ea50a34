"""
pcaphandler CLI - main entry point.
"""
import click

from ..utils.config import config
from ..utils.logger import setup_logging
from .assemble import assemble
from .dump import dump
from .frame import frame


@click.group()
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                                               case_sensitive=False),
              default=None, help=f"Logging level (default: {config.LOG_LEVEL})")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also log DEBUG output to this file")
def cli(log_level, log_file):
    """pcaphandler - build and read pcap capture files."""
    setup_logging(log_level, log_file)


cli.add_command(assemble)
cli.add_command(frame)
cli.add_command(dump)

if __name__ == "__main__":
    cli()
