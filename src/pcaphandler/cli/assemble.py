"""
CLI command for wrapping raw records into a capture file.
"""
import click

from ..exceptions import CaptureIOError
from ..pcap_loader.assembler import make_pcap_file


@click.command()
@click.argument("raw_file", type=click.Path(dir_okay=False))
@click.argument("name")
@click.option("--output-dir", "-o", type=click.Path(file_okay=False),
              help="Directory for NAME.pcap (default: PCAPHANDLER_CAPTURE_DIR or ~/AppCheck)")
def assemble(raw_file: str, name: str, output_dir):
    """
    Prefix RAW_FILE with a pcap global header and save it as NAME.pcap.

    Example:
      pcaphandler assemble stream.raw session1 -o captures/
    """
    try:
        path = make_pcap_file(raw_file, name, output_dir)
    except CaptureIOError as e:
        raise click.ClickException(str(e))
    click.echo(f"Wrote {path}")
