"""
PCAP file format reader (legacy .pcap).

Reference: https://wiki.wireshark.org/Development/LibpcapFileFormat

File structure:
- 24-byte global header
- Repeated packet records:
  - 16-byte packet header
  - Packet data (incl_len bytes, no padding)
"""

import mmap
import os
from typing import Any, Dict, Iterator, Optional, Tuple

from ..exceptions import PcapEOFError, PcapFormatError
from ..models.packet import (
    GLOBAL_HEADER_LEN,
    RECORD_HEADER_LEN,
    GlobalHeader,
    PacketRecordHeader,
    RawPacket,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


class PcapReader:
    """
    Reads legacy PCAP format files.

    Use as a context manager:

        with PcapReader("capture.pcap") as reader:
            for packet in reader:
                ...
    """

    # Link type constants (from pcap/bpf.h)
    DLT_NULL = 0          # BSD loopback
    DLT_EN10MB = 1        # Ethernet
    DLT_RAW = 12          # Raw IP
    DLT_LINUX_SLL = 113   # Linux cooked socket

    def __init__(self, filepath):
        """
        Initialize PCAP reader.

        Args:
            filepath: Path to .pcap file
        """
        self.filepath = os.fspath(filepath)
        self.file_handle = None
        self.mmap = None
        self.header: Optional[GlobalHeader] = None
        self.byte_order = '<'
        self.is_nanosecond = False
        self.link_type = self.DLT_EN10MB
        self._packet_count = 0
        self._time_range: Optional[Tuple[int, int]] = None
        self._file_size = 0

    def __enter__(self) -> "PcapReader":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def open(self):
        """
        Open and validate PCAP file.

        Raises:
            FileNotFoundError: If the file does not exist
            PcapFormatError: If the global header is invalid
        """
        if not os.path.exists(self.filepath):
            raise FileNotFoundError(f"PCAP file not found: {self.filepath}")

        self.file_handle = open(self.filepath, 'rb')
        try:
            self._file_size = os.path.getsize(self.filepath)
            self._read_global_header()
            self.mmap = mmap.mmap(
                self.file_handle.fileno(),
                0,  # Map entire file
                access=mmap.ACCESS_READ
            )
        except PcapFormatError:
            self.close()
            raise
        except (OSError, ValueError) as e:
            self.close()
            raise PcapFormatError(f"Failed to memory map file: {e}") from e

        logger.debug("Opened %s (byte order %s, link type %d, %d bytes)",
                     self.filepath, self.byte_order, self.link_type, self._file_size)

    def _read_global_header(self):
        """
        Read and validate PCAP global header (24 bytes).

        Sets byte_order, is_nanosecond and link_type.
        """
        data = self.file_handle.read(GLOBAL_HEADER_LEN)
        if len(data) < GLOBAL_HEADER_LEN:
            raise PcapFormatError(
                f"File too small for a PCAP global header: {len(data)} bytes"
            )

        header = GlobalHeader.unpack(data)
        if header is None:
            raise PcapFormatError(f"Unknown PCAP magic number: {data[:4].hex()}")

        self.header = header
        self.byte_order = header.byte_order
        self.is_nanosecond = header.is_nanosecond
        self.link_type = header.network

    def __iter__(self) -> Iterator[RawPacket]:
        """
        Yield packets in file order. packet_id starts at 1.

        Raises:
            RuntimeError: If file not opened
            PcapEOFError: If the file ends inside a record
        """
        if self.mmap is None:
            raise RuntimeError("PcapReader is not open")

        offset = GLOBAL_HEADER_LEN
        packet_id = 1
        file_size = len(self.mmap)

        while offset < file_size:
            if offset + RECORD_HEADER_LEN > file_size:
                raise PcapEOFError(
                    f"Truncated packet header at offset {offset} "
                    f"({file_size - offset} of {RECORD_HEADER_LEN} bytes)"
                )

            record = PacketRecordHeader.unpack(
                self.mmap[offset:offset + RECORD_HEADER_LEN], self.byte_order
            )
            data_start = offset + RECORD_HEADER_LEN
            if data_start + record.incl_len > file_size:
                raise PcapEOFError(
                    f"Packet {packet_id} at offset {offset} claims {record.incl_len} bytes, "
                    f"only {file_size - data_start} remain"
                )

            if self.is_nanosecond:
                timestamp_us = record.ts_sec * 1_000_000 + record.ts_usec // 1000
            else:
                timestamp_us = record.ts_sec * 1_000_000 + record.ts_usec

            packet = RawPacket(
                packet_id=packet_id,
                timestamp_us=timestamp_us,
                captured_length=record.incl_len,
                original_length=record.orig_len,
                link_type=self.link_type,
                data=bytes(self.mmap[data_start:data_start + record.incl_len]),
                pcap_ref=f"0:{offset}:{data_start}",
            )

            self._packet_count = packet_id
            if self._time_range is None:
                self._time_range = (timestamp_us, timestamp_us)
            else:
                start, end = self._time_range
                self._time_range = (min(start, timestamp_us), max(end, timestamp_us))

            offset = data_start + record.incl_len
            packet_id += 1
            yield packet

    def close(self):
        """Release the memory map and file handle."""
        if self.mmap is not None:
            self.mmap.close()
            self.mmap = None
        if self.file_handle is not None:
            self.file_handle.close()
            self.file_handle = None

    def get_session_info(self) -> Dict[str, Any]:
        """Return metadata about what has been read so far."""
        return {
            'packet_count': self._packet_count,
            'time_range': self._time_range or (0, 0),
            'link_types': [self.link_type],
            'file_size': self._file_size,
            'format': 'pcap',
            'byte_order': self.byte_order,
            'is_nanosecond': self.is_nanosecond,
            'link_type': self.link_type,
        }
