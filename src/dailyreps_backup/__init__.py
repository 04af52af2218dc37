"""DailyReps zero-knowledge backup server."""

__version__ = "0.1.0"
