"""
Record construction and per-record decoding.
"""

from .headers import build_frame, build_global_header, build_link_layer_header, build_record_header
from .packet_decoder import DecodeQuality, decode_record

__all__ = [
    'build_frame',
    'build_global_header',
    'build_link_layer_header',
    'build_record_header',
    'DecodeQuality',
    'decode_record',
]
