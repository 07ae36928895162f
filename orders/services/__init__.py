from .activities import ActivityRecorder
from .lifecycle import OrderLifecycleService

__all__ = [
    "ActivityRecorder",
    "OrderLifecycleService",
]
