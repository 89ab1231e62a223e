"""HEVC (H.265) bit reading, NAL unit scanning and syntax structure parsing."""

__version__ = "0.1.0"