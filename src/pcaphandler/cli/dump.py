"""
CLI command for rendering a capture file as text.
"""
import click

from ..exceptions import CaptureIOError, DecodeError
from ..pcap_loader.text_dumper import dump_to_text


@click.command()
@click.argument("capture_file", type=click.Path(dir_okay=False))
@click.option("--output", "-o", "output", type=click.Path(dir_okay=False),
              help="Text file to write (default: CAPTURE_FILE with a .txt suffix)")
def dump(capture_file: str, output):
    """
    Decode CAPTURE_FILE and write its text rendering.

    Each record replaces the previous one's text, so the output holds the
    last record.

    Example:
      pcaphandler dump session1.pcap
    """
    try:
        path = dump_to_text(capture_file, output)
    except (DecodeError, CaptureIOError) as e:
        raise click.ClickException(str(e))
    click.echo(f"Wrote {path}")
