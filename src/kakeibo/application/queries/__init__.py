"""Query layer - read operations that do not change state."""
