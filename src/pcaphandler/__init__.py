"""
pcaphandler - build and read classic pcap capture files.
"""

from .capture.headers import (
    build_frame,
    build_global_header,
    build_link_layer_header,
    build_record_header,
)
from .capture.packet_decoder import decode_record
from .exceptions import (
    CaptureIOError,
    DecodeError,
    InvalidIdentifierError,
    InvalidLengthError,
    PcapHandlerError,
    UnreadableOrMalformedError,
)
from .pcap_loader.assembler import assemble, make_pcap_file
from .pcap_loader.pcap_reader import PcapReader
from .pcap_loader.text_dumper import dump_to_text, render_fragment

__version__ = "0.1.0"

__all__ = [
    'build_frame',
    'build_global_header',
    'build_link_layer_header',
    'build_record_header',
    'decode_record',
    'assemble',
    'make_pcap_file',
    'PcapReader',
    'dump_to_text',
    'render_fragment',
    'PcapHandlerError',
    'InvalidLengthError',
    'InvalidIdentifierError',
    'CaptureIOError',
    'DecodeError',
    'UnreadableOrMalformedError',
]
