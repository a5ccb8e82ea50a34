# Packet data model
"""
Packet data models for pcaphandler.

THESE MODELS ARE IMMUTABLE. Once created, header and packet objects are
never modified; decoding and rendering build new objects.
"""

import struct
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

# Magic numbers as they appear on disk (first 4 bytes of the file)
MAGIC_BYTES_LITTLE_ENDIAN = b"\xd4\xc3\xb2\xa1"
MAGIC_BYTES_BIG_ENDIAN = b"\xa1\xb2\xc3\xd4"
MAGIC_BYTES_LITTLE_ENDIAN_NANO = b"\x4d\x3c\xb2\xa1"
MAGIC_BYTES_BIG_ENDIAN_NANO = b"\xa1\xb2\x3c\x4d"

GLOBAL_HEADER_LEN = 24
RECORD_HEADER_LEN = 16
LINK_LAYER_HEADER_LEN = 14


@dataclass(frozen=True)
class GlobalHeader:
    """
    pcap file header (24 bytes).

    Defaults are the values this engine always writes: microsecond
    little-endian magic, version 2.4, no timezone correction, snaplen 65535,
    Ethernet link type.
    """
    magic_number: int = 0xA1B2C3D4
    version_major: int = 2
    version_minor: int = 4
    thiszone: int = 0
    sigfigs: int = 0
    snaplen: int = 65535
    network: int = 1

    byte_order: str = "<"
    """struct byte order prefix the rest of the file uses"""

    is_nanosecond: bool = False

    @classmethod
    def unpack(cls, data: bytes) -> Optional["GlobalHeader"]:
        """Parse a global header, or return None if the magic is unknown."""
        if len(data) < GLOBAL_HEADER_LEN:
            return None
        magic = bytes(data[0:4])
        if magic == MAGIC_BYTES_LITTLE_ENDIAN:
            byte_order, nano = "<", False
        elif magic == MAGIC_BYTES_BIG_ENDIAN:
            byte_order, nano = ">", False
        elif magic == MAGIC_BYTES_LITTLE_ENDIAN_NANO:
            byte_order, nano = "<", True
        elif magic == MAGIC_BYTES_BIG_ENDIAN_NANO:
            byte_order, nano = ">", True
        else:
            return None
        fields = struct.unpack(byte_order + "IHHiIII", bytes(data[:GLOBAL_HEADER_LEN]))
        return cls(*fields, byte_order=byte_order, is_nanosecond=nano)


@dataclass(frozen=True)
class PacketRecordHeader:
    """Per-record header (16 bytes)."""
    ts_sec: int
    ts_usec: int
    """Microseconds, or nanoseconds for nanosecond-resolution files"""
    incl_len: int
    orig_len: int

    @classmethod
    def unpack(cls, data: bytes, byte_order: str = "<") -> "PacketRecordHeader":
        return cls(*struct.unpack(byte_order + "IIII", bytes(data[:RECORD_HEADER_LEN])))


@dataclass(frozen=True)
class SyntheticLinkLayerHeader:
    """
    Ethernet header written in front of every synthesized frame.

    The first four bytes of the source address carry the application
    identifier, big-endian.
    """
    destination: bytes
    identifier: int
    ethertype: int

    @classmethod
    def unpack(cls, data: bytes) -> Optional["SyntheticLinkLayerHeader"]:
        if len(data) < LINK_LAYER_HEADER_LEN:
            return None
        identifier, ethertype = struct.unpack_from("!I2xH", data, 6)
        return cls(destination=bytes(data[0:6]), identifier=identifier, ethertype=ethertype)


@dataclass(frozen=True)  # IMMUTABLE: Ensures deterministic processing
class RawPacket:
    """
    Raw packet as read directly from capture file.

    All timestamps are normalized to microseconds.
    packet_id is monotonic starting at 1 for each capture file.
    """
    packet_id: int

    timestamp_us: int
    """Microseconds since Unix epoch (1970-01-01)."""

    captured_length: int
    """Bytes actually captured (may be less than original due to snaplen)"""

    original_length: int
    """Bytes on the wire (original packet size)"""

    link_type: int
    """libpcap DLT_* constant (e.g., 1 = DLT_EN10MB for Ethernet)"""

    data: bytes

    pcap_ref: str
    """Format: 'file_id:start_offset:data_offset'
    Example: '0:24:40' means the record header starts at byte 24 and the
    packet data at byte 40 of the first file."""

    @property
    def is_truncated(self) -> bool:
        """True if captured length < original length (snaplen limited)."""
        return self.captured_length < self.original_length


class LayerKind(Enum):
    """Layers the decoder can be asked about."""
    TCP = "TCP"
    IPV4 = "IPv4"
    IPV6 = "IPv6"
    OTHER = "OTHER"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LayerView:
    """
    One decoded protocol layer.

    A single tagged type: `kind` says which of the optional fields are set.
    TCP layers fill the port/sequence fields, IP layers fill the address
    fields, OTHER layers carry only a name.
    """
    kind: LayerKind
    name: str
    """Short protocol name, e.g. 'tcp', 'ip', 'ipv6', 'eth'"""
    arrival_time: int

    # TCP
    source_port: Optional[int] = None
    destination_port: Optional[int] = None
    header_length: Optional[int] = None
    sequence_number: Optional[int] = None
    acknowledgement_number: Optional[int] = None
    flags: Optional[int] = None

    # IPv4 / IPv6
    source_address: Optional[str] = None
    destination_address: Optional[str] = None
    ip_protocol: Optional[int] = None

    @property
    def protocol(self) -> str:
        if self.kind is LayerKind.OTHER:
            return self.name.upper()
        return self.kind.value


@dataclass(frozen=True)
class DecodedRecordView:
    """
    Decode result for one capture record.

    Only lives while one record is rendered; never persisted.
    """
    raw_packet: RawPacket

    arrival_time: int
    """Microseconds since epoch, taken from the record header"""

    protocol: str = "PCAP"

    layers: Tuple[LayerView, ...] = field(default_factory=tuple)
    """Outermost layer first"""

    source_identifier: Optional[int] = None
    """Application identifier carried in the Ethernet source address"""

    quality_flags: int = 0

    def __post_init__(self):
        if not isinstance(self.layers, tuple):
            object.__setattr__(self, 'layers', tuple(self.layers))

    def has_layer(self, kind: LayerKind) -> bool:
        return any(layer.kind is kind for layer in self.layers)

    def get_layer(self, kind: LayerKind) -> Optional[LayerView]:
        for layer in self.layers:
            if layer.kind is kind:
                return layer
        return None

    def layers_below(self, kind: LayerKind) -> Tuple[LayerView, ...]:
        """Layers encapsulating the first layer of `kind`, nearest first."""
        for index, layer in enumerate(self.layers):
            if layer.kind is kind:
                return tuple(reversed(self.layers[:index]))
        return ()

    @property
    def stack_summary(self) -> str:
        return "/".join(layer.protocol for layer in self.layers) if self.layers else "unknown"
