"""
Plain-text rendering of capture files.

Each record's fragment replaces the destination's content, so after a full
pass the file holds the fragment of the last record only.
"""

from pathlib import Path

from ..capture.packet_decoder import decode_record
from ..exceptions import CaptureIOError, UnreadableOrMalformedError
from ..models.packet import DecodedRecordView, LayerKind
from ..utils.config import config
from ..utils.logger import get_logger
from .pcap_reader import PcapReader

logger = get_logger(__name__)


def render_fragment(view: DecodedRecordView) -> str:
    """Render one record. Records without a TCP layer render as ''."""
    tcp = view.get_layer(LayerKind.TCP)
    if tcp is None:
        return ""

    lines = [
        f"Arrival time: {view.arrival_time}",
        f"Protocol: {view.protocol}",
        f"Destination port: {tcp.destination_port}",
        f"Header length: {tcp.header_length}",
        f"Source port: {tcp.source_port}",
        f"Ack number: {tcp.acknowledgement_number}",
        f"Name: {tcp.name}",
        f"Sequence number: {tcp.sequence_number}",
    ]
    fragment = "".join(line + "\n" for line in lines)

    below = view.layers_below(LayerKind.TCP)
    for kind in (LayerKind.IPV4, LayerKind.IPV6):
        network = next((layer for layer in below if layer.kind is kind), None)
        if network is not None:
            fragment += f"{network.arrival_time}{network.protocol}"
            break

    return fragment


def text_path_for(source) -> Path:
    """`capture.pcap` -> `capture.txt`"""
    return Path(source).with_suffix(config.TEXT_SUFFIX)


def dump_to_text(source, destination=None) -> Path:
    """
    Decode `source` and write the text rendering to `destination`.

    Args:
        source: Capture file path
        destination: Text file path, defaults to `source` with a .txt suffix

    Returns:
        Path of the text file

    Raises:
        UnreadableOrMalformedError: If the capture cannot be opened or a
            record cannot be framed, or if `destination` is `source`. Open
            failures leave the destination untouched.
    """
    destination = Path(destination) if destination is not None else text_path_for(source)
    if Path(source).resolve() == destination.resolve():
        raise UnreadableOrMalformedError(
            f"Refusing to dump {source} onto itself, choose another destination"
        )

    reader = PcapReader(source)
    try:
        reader.open()
    except UnreadableOrMalformedError as e:
        logger.error("Cannot parse capture %s: %s", source, e)
        raise
    except OSError as e:
        logger.error("Cannot open capture %s: %s", source, e)
        raise UnreadableOrMalformedError(f"Cannot open capture {source}: {e}") from e

    records = 0
    try:
        for raw in reader:
            _write_text(destination, render_fragment(decode_record(raw)))
            records += 1
    except UnreadableOrMalformedError as e:
        logger.error("Capture %s is malformed after %d records: %s", source, records, e)
        raise
    finally:
        reader.close()

    if records == 0:
        _write_text(destination, "")

    logger.info("Dumped %d records from %s to %s", records, source, destination)
    return destination


def _write_text(destination: Path, text: str) -> None:
    try:
        with open(destination, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
    except OSError as e:
        raise CaptureIOError(f"Failed to write {destination}: {e}") from e
