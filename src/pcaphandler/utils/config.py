"""
Centralized configuration for pcaphandler.

Values come from the environment so the CLI and library callers see the same
defaults without a config file.
"""

import os
from pathlib import Path


class PcapHandlerConfig:
    """Centralized configuration for pcaphandler."""

    def __init__(self):
        # Directory named capture files are assembled into
        capture_dir = os.environ.get("PCAPHANDLER_CAPTURE_DIR")
        self.CAPTURE_DIR = Path(capture_dir) if capture_dir else Path.home() / "AppCheck"

        self.LOG_LEVEL = os.environ.get("PCAPHANDLER_LOG_LEVEL", "WARNING").upper()

        self.PCAP_SUFFIX = ".pcap"
        self.TEXT_SUFFIX = ".txt"

    def ensure_capture_dir(self) -> Path:
        """Create the capture directory if needed and return it."""
        self.CAPTURE_DIR.mkdir(parents=True, exist_ok=True)
        return self.CAPTURE_DIR


# Global configuration instance
config = PcapHandlerConfig()
