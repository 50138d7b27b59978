"""Financial reporting and comparative analytics for farm records."""

__version__ = "0.1.0"
