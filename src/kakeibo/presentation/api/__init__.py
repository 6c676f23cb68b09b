"""HTTP API for the sync service."""
