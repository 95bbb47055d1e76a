"""Voice habit tracker: turn spoken transcripts into activity log entries."""

__version__ = "0.1.0"
