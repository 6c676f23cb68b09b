"""Sync domain: intervals, settings, run history and incremental strategy."""
