"""
CLI command for appending one synthesized frame to a raw record stream.
"""
import click

from ..capture.headers import build_frame
from ..exceptions import InvalidIdentifierError, InvalidLengthError


@click.command()
@click.argument("payload_file", type=click.File("rb"))
@click.option("--uid", "-u", type=int, required=True, help="Application identifier for the frame")
@click.option("--stream", "-s", "stream", type=click.Path(dir_okay=False), required=True,
              help="Raw record stream to append to (created if missing)")
def frame(payload_file, uid: int, stream: str):
    """
    Append PAYLOAD_FILE as one record (record header + synthetic Ethernet
    header + payload) to STREAM.

    Example:
      pcaphandler frame packet.bin --uid 10123 --stream stream.raw
    """
    payload = payload_file.read()
    try:
        record = build_frame(payload, uid)
    except InvalidIdentifierError as e:
        raise click.BadParameter(str(e), param_hint="'--uid'")
    except InvalidLengthError as e:
        raise click.BadParameter(str(e), param_hint="'PAYLOAD_FILE'")

    try:
        with open(stream, "ab") as f:
            f.write(record)
    except OSError as e:
        raise click.ClickException(f"Failed to append to {stream}: {e}")
    click.echo(f"Appended {len(record)} bytes to {stream}")
