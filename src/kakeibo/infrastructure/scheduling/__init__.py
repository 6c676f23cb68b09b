"""Time-based trigger adapters."""

from kakeibo.infrastructure.scheduling.apscheduler_trigger_registry import (
    APSchedulerTriggerRegistry,
)

__all__ = ["APSchedulerTriggerRegistry"]
