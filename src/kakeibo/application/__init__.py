"""Application layer: use cases orchestrating the sync domain."""
