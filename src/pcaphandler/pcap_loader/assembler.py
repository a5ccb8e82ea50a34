"""
Capture file assembly.

Wraps an already framed byte stream (records written by the capture
pipeline) with the pcap global header. The raw bytes are not re-validated.
"""

import os
import stat
import tempfile
from pathlib import Path

from ..capture.headers import build_global_header
from ..exceptions import CaptureIOError
from ..utils.config import config
from ..utils.logger import get_logger

logger = get_logger(__name__)


def assemble(raw_bytes: bytes, destination) -> None:
    """
    Write `global header ++ raw_bytes` as the whole content of `destination`.

    Args:
        raw_bytes: Framed records (bytes-like), may be empty
        destination: Path (created or replaced atomically) or a writable
            binary file object (truncated, then written from offset 0)

    Raises:
        TypeError: If raw_bytes is not bytes-like
        CaptureIOError: If the destination cannot be created or written
    """
    if raw_bytes is None:
        raw_bytes = b""
    if not isinstance(raw_bytes, (bytes, bytearray, memoryview)):
        raise TypeError(f"raw_bytes must be bytes-like, got {type(raw_bytes).__name__}")
    content = build_global_header() + bytes(raw_bytes)

    if hasattr(destination, "write"):
        try:
            destination.seek(0)
            destination.truncate()
            destination.write(content)
            destination.flush()
        except (OSError, ValueError) as e:
            logger.error("Failed to write capture to file object: %s", e)
            raise CaptureIOError(f"Failed to write capture: {e}") from e
        logger.info("Wrote %d byte capture to file object", len(content))
        return

    path = Path(destination)
    try:
        mode = _target_mode(path)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent) or ".")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            # mkstemp creates 0600; keep the replaced file's mode or the umask default
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        logger.error("Failed to write capture %s: %s", path, e)
        raise CaptureIOError(f"Failed to write capture {path}: {e}") from e

    logger.info("Wrote %d byte capture to %s", len(content), path)


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def make_pcap_file(source, file_name: str, output_dir=None) -> Path:
    """
    Assemble `<output_dir>/<file_name>.pcap` from the raw records in `source`.

    Args:
        source: File holding framed records; None or a missing file is
            treated as an empty capture
        file_name: Base name of the capture, without suffix
        output_dir: Target directory (created if missing), defaults to the
            configured capture dir

    Returns:
        Path of the written capture file
    """
    target_dir = config.CAPTURE_DIR if output_dir is None else Path(output_dir)
    try:
        if output_dir is None:
            config.ensure_capture_dir()
        else:
            target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CaptureIOError(f"Cannot create capture directory {target_dir}: {e}") from e

    pcap_path = target_dir / f"{file_name}{config.PCAP_SUFFIX}"
    assemble(_read_raw(source), pcap_path)
    return pcap_path


def _read_raw(source) -> bytes:
    if source is None:
        return b""
    path = Path(source)
    if not path.exists():
        logger.warning("Raw capture %s does not exist, writing empty capture", path)
        return b""
    try:
        return path.read_bytes()
    except OSError as e:
        raise CaptureIOError(f"Failed to read raw capture {path}: {e}") from e
