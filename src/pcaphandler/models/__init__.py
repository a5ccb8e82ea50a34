"""
Capture file data models.
"""

from .packet import (
    GlobalHeader,
    PacketRecordHeader,
    SyntheticLinkLayerHeader,
    RawPacket,
    LayerKind,
    LayerView,
    DecodedRecordView,
)

__all__ = [
    'GlobalHeader',
    'PacketRecordHeader',
    'SyntheticLinkLayerHeader',
    'RawPacket',
    'LayerKind',
    'LayerView',
    'DecodedRecordView',
]
