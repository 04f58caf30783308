from .base import Notifier, NotifierError
from .fanout import FanoutNotifier
from .feed import FeedNotifier
from .log import LogNotifier

__all__ = ["FanoutNotifier", "FeedNotifier", "LogNotifier", "Notifier", "NotifierError"]
