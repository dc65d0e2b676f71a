"""
Matchday Services

Persistence, change notification, identity and awards.
"""

from services.event_bus import EventBus
from services.store import ScheduleStore, Subscription

__all__ = ["EventBus", "ScheduleStore", "Subscription"]
