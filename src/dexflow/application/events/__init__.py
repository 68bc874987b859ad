"""Order event delivery"""

from .broadcaster import EventBroadcaster, QueueSubscriber, Subscriber

__all__ = ["EventBroadcaster", "QueueSubscriber", "Subscriber"]
