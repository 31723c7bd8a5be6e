from .calendar_event import CalendarEvent
from .email import Email
from .notification import Notification
from .task import Priority, Task
from .user import User

__all__ = [
    "CalendarEvent",
    "Email",
    "Notification",
    "Priority",
    "Task",
    "User",
]
