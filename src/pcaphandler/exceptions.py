"""
Error taxonomy for pcaphandler.

Builders raise validation errors straight to their caller, the assembler
raises CaptureIOError for any failed write, and everything on the read side
surfaces as a DecodeError subclass.
"""


class PcapHandlerError(Exception):
    """Base class for all pcaphandler errors."""


class InvalidLengthError(PcapHandlerError, ValueError):
    """Payload length is negative or overflows the 32-bit length fields."""


class InvalidIdentifierError(PcapHandlerError, ValueError):
    """Application identifier does not fit in 32 bits."""


class CaptureIOError(PcapHandlerError, OSError):
    """Capture file could not be created or written."""


class DecodeError(PcapHandlerError):
    """Capture stream could not be decoded."""


class UnreadableOrMalformedError(DecodeError):
    """Capture stream could not be opened or parsed."""


class PcapFormatError(UnreadableOrMalformedError):
    """Global header is missing or not a pcap header."""


class PcapEOFError(UnreadableOrMalformedError):
    """File ends in the middle of a record."""
