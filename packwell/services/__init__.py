# Store services

from .mail_client import MailClient
from .notifications import NotificationDispatcher, get_dispatcher
from .order_state import TRANSITIONS, can_cancel, can_transition, is_terminal

__all__ = [
    "MailClient",
    "NotificationDispatcher",
    "get_dispatcher",
    "TRANSITIONS",
    "can_cancel",
    "can_transition",
    "is_terminal",
]
