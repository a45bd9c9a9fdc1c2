"""Real-time notifications pushed by the platform."""

from clinicdesk.realtime.events import NotificationEvent
from clinicdesk.realtime.stream import NotificationStream, Subscription

__all__ = ["NotificationEvent", "NotificationStream", "Subscription"]
