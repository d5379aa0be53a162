"""drivesync: sync a local directory tree with Google Drive."""

__version__ = "0.1.0"
