"""Command layer - write operations that mutate state.

Commands represent user intentions to change system state. They orchestrate
domain services and return structured results via DTOs.
"""
