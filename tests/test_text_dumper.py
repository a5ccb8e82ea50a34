"""
Tests for the text dump of capture files.
"""
import pytest

from pcaphandler.capture.headers import build_frame
from pcaphandler.capture.packet_decoder import decode_record
from pcaphandler.exceptions import DecodeError, UnreadableOrMalformedError
from pcaphandler.models.packet import RawPacket
from pcaphandler.pcap_loader.assembler import assemble
from pcaphandler.pcap_loader.text_dumper import dump_to_text, render_fragment, text_path_for

from pcap_samples import (
    ethernet_frame,
    ipv4_tcp_segment,
    ipv4_udp_datagram,
    ipv6_tcp_segment,
    record,
    write_capture,
)

TS = 1700000000


def test_fragment_for_ipv4_tcp():
    data = ethernet_frame(ipv4_tcp_segment(src_port=51000, dst_port=443, seq=1000, ack=2000))
    raw = RawPacket(packet_id=1, timestamp_us=TS * 1_000_000, captured_length=len(data),
                    original_length=len(data), link_type=1, data=data, pcap_ref="0:24:40")

    assert render_fragment(decode_record(raw)) == (
        "Arrival time: 1700000000000000\n"
        "Protocol: PCAP\n"
        "Destination port: 443\n"
        "Header length: 20\n"
        "Source port: 51000\n"
        "Ack number: 2000\n"
        "Name: tcp\n"
        "Sequence number: 1000\n"
        "1700000000000000IPv4"
    )


def test_fragment_without_tcp_is_empty():
    data = ethernet_frame(ipv4_udp_datagram())
    raw = RawPacket(packet_id=1, timestamp_us=0, captured_length=len(data),
                    original_length=len(data), link_type=1, data=data, pcap_ref="0:24:40")
    assert render_fragment(decode_record(raw)) == ""


def test_dump_single_tcp_ipv4_record(tmp_path):
    source = write_capture(tmp_path / "one.pcap",
                           record(ethernet_frame(ipv4_tcp_segment(dst_port=443)), ts_sec=TS))
    destination = dump_to_text(source, tmp_path / "one.txt")

    text = destination.read_text(encoding="utf-8")
    assert "Destination port: 443" in text
    assert text.endswith(f"{TS * 1_000_000}IPv4")


def test_dump_ipv6_appends_ipv6_fragment(tmp_path):
    source = write_capture(tmp_path / "v6.pcap",
                           record(ethernet_frame(ipv6_tcp_segment(), ethertype=0x86DD), ts_sec=TS))
    text = dump_to_text(source).read_text(encoding="utf-8")
    assert "Destination port: 22" in text
    assert text.endswith(f"{TS * 1_000_000}IPv6")


def test_dump_without_tcp_records_is_empty(tmp_path):
    source = write_capture(tmp_path / "udp.pcap",
                           record(ethernet_frame(ipv4_udp_datagram())),
                           record(ethernet_frame(ipv4_udp_datagram(dst_port=123))))
    destination = dump_to_text(source, tmp_path / "udp.txt")
    assert destination.read_text(encoding="utf-8") == ""


def test_dump_of_header_only_capture_is_empty(tmp_path):
    source = tmp_path / "empty.pcap"
    assemble(b"", source)
    assert dump_to_text(source).read_text(encoding="utf-8") == ""


def test_dump_keeps_only_last_record(tmp_path):
    last = ethernet_frame(ipv4_tcp_segment(dst_port=443, seq=77))
    source = write_capture(
        tmp_path / "many.pcap",
        record(ethernet_frame(ipv4_udp_datagram()), ts_sec=TS),
        record(ethernet_frame(ipv4_udp_datagram()), ts_sec=TS + 1),
        record(last, ts_sec=TS + 2),
    )
    expected = render_fragment(decode_record(RawPacket(
        packet_id=3, timestamp_us=(TS + 2) * 1_000_000, captured_length=len(last),
        original_length=len(last), link_type=1, data=last, pcap_ref="")))

    text = dump_to_text(source, tmp_path / "many.txt").read_text(encoding="utf-8")
    assert text == expected
    assert text.count("Arrival time:") == 1


def test_dump_last_record_without_tcp_clears_output(tmp_path):
    source = write_capture(
        tmp_path / "clear.pcap",
        record(ethernet_frame(ipv4_tcp_segment(dst_port=443))),
        record(ethernet_frame(ipv4_udp_datagram())),
    )
    assert dump_to_text(source).read_text(encoding="utf-8") == ""


def test_end_to_end_synthesized_capture(tmp_path):
    raw = build_frame(ipv4_tcp_segment(dst_port=443), 10123)
    source = tmp_path / "app.pcap"
    assemble(raw, source)

    destination = dump_to_text(source)
    assert destination == tmp_path / "app.txt"
    assert "Destination port: 443" in destination.read_text(encoding="utf-8")


def test_default_destination_replaces_suffix(tmp_path):
    assert text_path_for(tmp_path / "capture.pcap") == tmp_path / "capture.txt"


def test_missing_source_raises_without_touching_destination(tmp_path):
    destination = tmp_path / "out.txt"
    destination.write_text("previous", encoding="utf-8")
    with pytest.raises(UnreadableOrMalformedError):
        dump_to_text(tmp_path / "missing.pcap", destination)
    assert destination.read_text(encoding="utf-8") == "previous"


def test_garbage_source_raises_decode_error(tmp_path):
    source = tmp_path / "garbage.pcap"
    source.write_bytes(b"this is not a capture file at all")
    with pytest.raises(DecodeError):
        dump_to_text(source)
    assert not (tmp_path / "garbage.txt").exists()


def test_malformed_later_record_fails_whole_dump(tmp_path):
    good = record(ethernet_frame(ipv4_tcp_segment(dst_port=443)))
    source = write_capture(tmp_path / "broken.pcap", good, good[:-4])
    with pytest.raises(UnreadableOrMalformedError):
        dump_to_text(source)


def test_txt_capture_is_not_dumped_onto_itself(tmp_path):
    source = write_capture(tmp_path / "cap.txt",
                           *(record(ethernet_frame(ipv4_tcp_segment(dst_port=443))) for _ in range(3)))
    original = source.read_bytes()

    with pytest.raises(UnreadableOrMalformedError):
        dump_to_text(source)
    assert source.read_bytes() == original


def test_explicit_destination_equal_to_source_is_refused(tmp_path):
    source = write_capture(tmp_path / "cap.pcap", record(ethernet_frame(ipv4_tcp_segment())))
    original = source.read_bytes()
    (tmp_path / "sub").mkdir()

    with pytest.raises(UnreadableOrMalformedError):
        dump_to_text(source, tmp_path / "sub" / ".." / "cap.pcap")
    assert source.read_bytes() == original
