"""trackpush — push module snapshots to a registry track from CI."""

__version__ = "0.3.0"
