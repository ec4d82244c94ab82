from .registry import MonitorHandle, MonitorRegistry
from .stats import MonitorStats
from .topic_monitor import MonitorState, TopicMonitor

__all__ = [
    "MonitorHandle",
    "MonitorRegistry",
    "MonitorState",
    "MonitorStats",
    "TopicMonitor",
]
