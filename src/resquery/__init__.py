"""resquery — fetch numbered board posts with compact range expressions."""

__version__ = "0.3.0"
