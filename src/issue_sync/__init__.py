"""Background synchronization of remote issues into local file markers."""

__version__ = "0.3.0"
