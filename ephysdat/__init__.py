"""ephysdat: convert fragmented multi-channel ephys recordings into flat .dat files."""

__version__ = "0.1.0"
