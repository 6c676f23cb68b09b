"""Infrastructure adapters for persistence, scheduling and integrations."""
