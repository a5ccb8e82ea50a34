"""
Capture file reading, assembly and text dumps.
"""

from .pcap_reader import PcapReader
from .assembler import assemble, make_pcap_file
from .text_dumper import dump_to_text, render_fragment

__all__ = [
    'PcapReader',
    'assemble',
    'make_pcap_file',
    'dump_to_text',
    'render_fragment',
]
