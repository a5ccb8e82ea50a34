"""
pcap header builders.

Reference: https://wiki.wireshark.org/Development/LibpcapFileFormat

Every synthesized record is laid out as:
- 16-byte record header (fixed timestamp, lengths include the L2 header)
- 14-byte synthetic Ethernet header (app identifier in the source address)
- payload

The global header and record lengths are little-endian. The identifier in the
Ethernet source address is big-endian. Both are part of the file contract.
"""

import struct

from ..exceptions import InvalidIdentifierError, InvalidLengthError
from ..models.packet import LINK_LAYER_HEADER_LEN
from ..utils.logger import get_logger

logger = get_logger(__name__)

UINT32_MAX = 0xFFFFFFFF
INT32_MIN = -0x80000000

# Global header fields, as raw octets
_MAGIC_NUMBER = b"\xd4\xc3\xb2\xa1"
_VERSION_MAJOR = b"\x02\x00"
_VERSION_MINOR = b"\x04\x00"
_THISZONE = b"\x00\x00\x00\x00"
_SIGFIGS = b"\x00\x00\x00\x00"
_SNAPLEN = b"\xff\xff\x00\x00"
_NETWORK = b"\x01\x00\x00\x00"  # LINKTYPE_ETHERNET

GLOBAL_HEADER = (_MAGIC_NUMBER + _VERSION_MAJOR + _VERSION_MINOR + _THISZONE
                 + _SIGFIGS + _SNAPLEN + _NETWORK)

# Record timestamp is not sampled from a clock
_TS_SEC = b"\xfb\x15\xf5\x55"
_TS_USEC = b"\x98\x6a\x0b\x00"

# Synthetic Ethernet header
ETH_DESTINATION = b"\x00\xe0\x81\xd7\xb5\xa6"
_ETH_SOURCE_PAD = b"\x00\x00"
_ETH_TYPE_IPV4 = b"\x08\x00"


def build_global_header() -> bytes:
    """Return the 24-byte pcap global header. Identical on every call."""
    logger.debug("build_global_header()")
    return GLOBAL_HEADER


def build_record_header(payload_length: int) -> bytes:
    """
    Return the 16-byte record header for a frame carrying `payload_length`
    bytes after the synthetic Ethernet header.

    incl_len and orig_len both equal payload_length + 14.

    Raises:
        InvalidLengthError: If payload_length is negative, not an integer,
            or the frame length does not fit in 32 bits
    """
    logger.debug("build_record_header(): %s", payload_length)
    if isinstance(payload_length, bool) or not isinstance(payload_length, int):
        raise InvalidLengthError(f"Payload length must be an integer, got {payload_length!r}")
    if payload_length < 0:
        raise InvalidLengthError(f"Payload length must not be negative, got {payload_length}")

    frame_length = payload_length + LINK_LAYER_HEADER_LEN
    if frame_length > UINT32_MAX:
        raise InvalidLengthError(
            f"Payload length {payload_length} overflows the 32-bit record length"
        )

    return _TS_SEC + _TS_USEC + struct.pack("<II", frame_length, frame_length)


def build_link_layer_header(identifier: int) -> bytes:
    """
    Return the 14-byte synthetic Ethernet header for `identifier`.

    Destination address and ethertype (IPv4) are fixed. The identifier fills
    the first 4 bytes of the source address, big-endian; negative values are
    written as two's complement.

    Raises:
        InvalidIdentifierError: If identifier is not representable in 32 bits
    """
    logger.debug("build_link_layer_header(): %s", identifier)
    if isinstance(identifier, bool) or not isinstance(identifier, int):
        raise InvalidIdentifierError(f"Identifier must be an integer, got {identifier!r}")
    if identifier < INT32_MIN or identifier > UINT32_MAX:
        raise InvalidIdentifierError(f"Identifier {identifier} does not fit in 32 bits")

    source = struct.pack("!I", identifier & UINT32_MAX) + _ETH_SOURCE_PAD
    return ETH_DESTINATION + source + _ETH_TYPE_IPV4


def build_frame(payload: bytes, identifier: int) -> bytes:
    """
    Return one complete record: record header, synthetic Ethernet header and
    payload, ready to append to a capture stream.
    """
    payload = bytes(payload)
    return build_record_header(len(payload)) + build_link_layer_header(identifier) + payload
