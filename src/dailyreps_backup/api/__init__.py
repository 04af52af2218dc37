"""HTTP API for the backup server."""
