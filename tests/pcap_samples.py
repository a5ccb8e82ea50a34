"""
Hand-built packets and capture files for the test suite.
"""
import struct

from pcaphandler.capture.headers import build_global_header


def ipv4_tcp_segment(
    src_ip=(192, 168, 1, 1),
    dst_ip=(8, 8, 8, 8),
    src_port=12345,
    dst_port=80,
    seq=1,
    ack=0,
    flags=0x12,  # SYN+ACK
    payload=b"",
):
    """IPv4 header + TCP header (+ payload), no link layer."""
    total_length = 20 + 20 + len(payload)
    ip_header = struct.pack(
        "!BBHHHBBH4B4B",
        0x45,  # version 4, IHL 5
        0,
        total_length,
        0,
        0,
        64,  # TTL
        6,  # TCP
        0,
        *src_ip,
        *dst_ip,
    )
    tcp_header = struct.pack(
        "!HHIIHHHH",
        src_port,
        dst_port,
        seq,
        ack,
        (5 << 12) | flags,
        1024,
        0,
        0,
    )
    return ip_header + tcp_header + payload


def ipv6_tcp_segment(src_port=40000, dst_port=22, seq=7, ack=9):
    """IPv6 header + TCP header, no link layer."""
    ip_header = struct.pack("!IHBB", 6 << 28, 20, 6, 64)
    ip_header += bytes(15) + b"\x01"  # ::1
    ip_header += bytes(15) + b"\x02"  # ::2
    tcp_header = struct.pack("!HHIIHHHH", src_port, dst_port, seq, ack, (5 << 12) | 0x10, 512, 0, 0)
    return ip_header + tcp_header


def ipv4_udp_datagram(src_port=5353, dst_port=53):
    ip_header = struct.pack("!BBHHHBBH4B4B", 0x45, 0, 28, 0, 0, 64, 17, 0,
                            10, 0, 0, 1, 10, 0, 0, 2)
    return ip_header + struct.pack("!HHHH", src_port, dst_port, 8, 0)


def ethernet_frame(network_packet, ethertype=0x0800, src=b"\x11\x22\x33\x44\x55\x66"):
    return b"\xaa\xbb\xcc\xdd\xee\xff" + src + struct.pack("!H", ethertype) + network_packet


def record(frame, ts_sec=1700000000, ts_usec=0, byte_order="<", orig_len=None):
    """One pcap record: 16-byte header + frame."""
    orig_len = len(frame) if orig_len is None else orig_len
    return struct.pack(byte_order + "IIII", ts_sec, ts_usec, len(frame), orig_len) + frame


def write_capture(path, *records, header=None):
    """Write a capture file with the engine's global header (or `header`)."""
    path.write_bytes((build_global_header() if header is None else header) + b"".join(records))
    return path
