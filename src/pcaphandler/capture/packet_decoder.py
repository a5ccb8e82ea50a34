"""
Per-record protocol decoding (L2/L3/L4).

This module is deterministic and best-effort:
- It never throws on malformed/truncated packet contents
- It returns quality flags to describe decode issues
- It only parses headers (no payload parsing)

Framing errors (a record that does not fit in the file) are the reader's
concern and are raised there.
"""
from __future__ import annotations

from enum import IntFlag
import ipaddress
import struct
from typing import List, Optional, Tuple

from ..models.packet import DecodedRecordView, LayerKind, LayerView, RawPacket, SyntheticLinkLayerHeader

# Link type constants (libpcap DLT_*)
DLT_NULL = 0
DLT_EN10MB = 1
DLT_RAW = 12
DLT_LINUX_SLL = 113

# EtherType constants
ETH_TYPE_IPV4 = 0x0800
ETH_TYPE_ARP = 0x0806
ETH_TYPE_IPV6 = 0x86DD
ETH_TYPE_VLAN = 0x8100
ETH_TYPE_QINQ = 0x88A8

# IP protocol numbers
IP_PROTO_ICMP = 1
IP_PROTO_TCP = 6
IP_PROTO_UDP = 17
IP_PROTO_ICMPV6 = 58

_L4_NAMES = {
    IP_PROTO_ICMP: "icmp",
    IP_PROTO_UDP: "udp",
    IP_PROTO_ICMPV6: "icmpv6",
}


class DecodeQuality(IntFlag):
    OK = 0
    TRUNCATED = 1 << 0
    UNSUPPORTED_LINKTYPE = 1 << 1
    MALFORMED_L2 = 1 << 2
    MALFORMED_L3 = 1 << 3
    MALFORMED_L4 = 1 << 4
    UNKNOWN_L3 = 1 << 5
    UNKNOWN_L4 = 1 << 6


def quality_flag_names(flags: int) -> Tuple[str, ...]:
    """Return decode quality flag names for display."""
    if flags == 0:
        return ("OK",)
    names = []
    for flag in DecodeQuality:
        if flag != DecodeQuality.OK and (flags & flag):
            names.append(flag.name)
    return tuple(names)


def decode_record(raw: RawPacket) -> DecodedRecordView:
    """Decode a RawPacket into a DecodedRecordView (best-effort)."""
    data = raw.data or b""
    cap_len = len(data)
    arrival = raw.timestamp_us

    quality = DecodeQuality.OK
    if raw.is_truncated:
        quality |= DecodeQuality.TRUNCATED

    layers: List[LayerView] = []
    identifier = None
    network_type = None
    offset = 0

    if raw.link_type == DLT_EN10MB:
        if cap_len < 14:
            quality |= DecodeQuality.MALFORMED_L2
            return _finish(raw, layers, identifier, quality)
        layers.append(LayerView(kind=LayerKind.OTHER, name="eth", arrival_time=arrival))
        link_header = SyntheticLinkLayerHeader.unpack(data)
        identifier = link_header.identifier
        ethertype = link_header.ethertype
        offset = 14

        # VLAN tags (single or double)
        for _ in range(2):
            if ethertype not in (ETH_TYPE_VLAN, ETH_TYPE_QINQ):
                break
            if cap_len < offset + 4:
                quality |= DecodeQuality.MALFORMED_L2
                return _finish(raw, layers, identifier, quality)
            layers.append(LayerView(kind=LayerKind.OTHER, name="vlan", arrival_time=arrival))
            ethertype = struct.unpack_from("!H", data, offset + 2)[0]
            offset += 4

        if ethertype == ETH_TYPE_IPV4:
            network_type = 4
        elif ethertype == ETH_TYPE_IPV6:
            network_type = 6
        elif ethertype == ETH_TYPE_ARP:
            layers.append(LayerView(kind=LayerKind.OTHER, name="arp", arrival_time=arrival))
        else:
            quality |= DecodeQuality.UNKNOWN_L3

    elif raw.link_type == DLT_RAW:
        # Raw IP without L2 header
        if cap_len < 1:
            quality |= DecodeQuality.MALFORMED_L3
            return _finish(raw, layers, identifier, quality)
        network_type = data[0] >> 4

    elif raw.link_type == DLT_LINUX_SLL:
        if cap_len < 16:
            quality |= DecodeQuality.MALFORMED_L2
            return _finish(raw, layers, identifier, quality)
        layers.append(LayerView(kind=LayerKind.OTHER, name="sll", arrival_time=arrival))
        ethertype = struct.unpack_from("!H", data, 14)[0]
        offset = 16
        if ethertype == ETH_TYPE_IPV4:
            network_type = 4
        elif ethertype == ETH_TYPE_IPV6:
            network_type = 6
        else:
            quality |= DecodeQuality.UNKNOWN_L3

    elif raw.link_type == DLT_NULL:
        if cap_len < 4:
            quality |= DecodeQuality.MALFORMED_L2
            return _finish(raw, layers, identifier, quality)
        layers.append(LayerView(kind=LayerKind.OTHER, name="null", arrival_time=arrival))
        family_le = struct.unpack_from("<I", data, 0)[0]
        family_be = struct.unpack_from(">I", data, 0)[0]
        family = family_le if family_le in (2, 24, 28, 30) else family_be
        offset = 4
        if family == 2:
            network_type = 4
        elif family in (24, 28, 30):
            network_type = 6
        else:
            quality |= DecodeQuality.UNKNOWN_L3

    else:
        quality |= DecodeQuality.UNSUPPORTED_LINKTYPE
        return _finish(raw, layers, identifier, quality)

    if network_type == 4:
        ip_layer, l4_offset = _parse_ipv4(data, offset, arrival)
    elif network_type == 6:
        ip_layer, l4_offset = _parse_ipv6(data, offset, arrival)
    else:
        if network_type is not None:
            quality |= DecodeQuality.UNKNOWN_L3
        return _finish(raw, layers, identifier, quality)

    if ip_layer is None:
        quality |= DecodeQuality.MALFORMED_L3
        return _finish(raw, layers, identifier, quality)
    layers.append(ip_layer)

    l4_layer, l4_quality = _parse_l4(data, l4_offset, ip_layer.ip_protocol, arrival)
    quality |= l4_quality
    if l4_layer is not None:
        layers.append(l4_layer)

    return _finish(raw, layers, identifier, quality)


def _finish(raw: RawPacket,
            layers: List[LayerView],
            identifier: Optional[int],
            quality: DecodeQuality) -> DecodedRecordView:
    return DecodedRecordView(
        raw_packet=raw,
        arrival_time=raw.timestamp_us,
        layers=tuple(layers),
        source_identifier=identifier,
        quality_flags=int(quality),
    )


def _parse_ipv4(data: bytes, offset: int, arrival: int) -> Tuple[Optional[LayerView], Optional[int]]:
    cap_len = len(data)
    if offset + 20 > cap_len:
        return None, None
    vihl = data[offset]
    version = vihl >> 4
    ihl = (vihl & 0x0F) * 4
    if version != 4 or ihl < 20 or offset + ihl > cap_len:
        return None, None

    layer = LayerView(
        kind=LayerKind.IPV4,
        name="ip",
        arrival_time=arrival,
        source_address=_format_ipv4(data[offset + 12:offset + 16]),
        destination_address=_format_ipv4(data[offset + 16:offset + 20]),
        ip_protocol=data[offset + 9],
    )
    return layer, offset + ihl


def _parse_ipv6(data: bytes, offset: int, arrival: int) -> Tuple[Optional[LayerView], Optional[int]]:
    if offset + 40 > len(data):
        return None, None
    if data[offset] >> 4 != 6:
        return None, None

    layer = LayerView(
        kind=LayerKind.IPV6,
        name="ipv6",
        arrival_time=arrival,
        source_address=_format_ipv6(data[offset + 8:offset + 24]),
        destination_address=_format_ipv6(data[offset + 24:offset + 40]),
        ip_protocol=data[offset + 6],
    )
    return layer, offset + 40


def _parse_l4(data: bytes, offset: int, ip_protocol: int,
              arrival: int) -> Tuple[Optional[LayerView], DecodeQuality]:
    cap_len = len(data)

    if ip_protocol == IP_PROTO_TCP:
        if offset + 20 > cap_len:
            return None, DecodeQuality.MALFORMED_L4
        src_port, dst_port, seq, ack, offset_byte, flags = struct.unpack_from("!HHIIBB", data, offset)
        header_length = (offset_byte >> 4) * 4
        quality = DecodeQuality.OK
        if header_length < 20 or offset + header_length > cap_len:
            quality = DecodeQuality.MALFORMED_L4
        layer = LayerView(
            kind=LayerKind.TCP,
            name="tcp",
            arrival_time=arrival,
            source_port=src_port,
            destination_port=dst_port,
            header_length=header_length,
            sequence_number=seq,
            acknowledgement_number=ack,
            flags=flags,
        )
        return layer, quality

    if ip_protocol == IP_PROTO_UDP:
        if offset + 8 > cap_len:
            return None, DecodeQuality.MALFORMED_L4
        src_port, dst_port = struct.unpack_from("!HH", data, offset)
        layer = LayerView(kind=LayerKind.OTHER, name="udp", arrival_time=arrival,
                          source_port=src_port, destination_port=dst_port)
        return layer, DecodeQuality.OK

    name = _L4_NAMES.get(ip_protocol)
    if name is not None:
        return LayerView(kind=LayerKind.OTHER, name=name, arrival_time=arrival), DecodeQuality.OK

    return None, DecodeQuality.UNKNOWN_L4


def _format_ipv4(addr: bytes) -> Optional[str]:
    if len(addr) != 4:
        return None
    return "{}.{}.{}.{}".format(addr[0], addr[1], addr[2], addr[3])


def _format_ipv6(addr: bytes) -> Optional[str]:
    if len(addr) != 16:
        return None
    return str(ipaddress.IPv6Address(bytes(addr)))
