"""Aggregate application use cases."""

from .notifications import (
    DeliveryPolicy,
    EngagementEvaluator,
    Scheduler,
    calculate_streak,
)

__all__ = [
    "DeliveryPolicy",
    "EngagementEvaluator",
    "Scheduler",
    "calculate_streak",
]
