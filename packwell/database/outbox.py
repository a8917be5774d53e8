"""Notification outbox storage"""

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..models.common import utcnow


class MessageStatus(str, Enum):
    PENDING = "pending"
    SENDING = "sending"
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class OutboxMessage:
    """Email waiting for delivery"""
    id: str
    to: str
    subject: str
    html: str
    event: str
    status: MessageStatus = MessageStatus.PENDING
    attempts: int = 0
    last_error: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    sent_at: Optional[datetime] = None


class OutboxDatabase:
    """In-memory outbox; handlers enqueue, the dispatcher drains"""

    def __init__(self):
        self.messages: dict[str, OutboxMessage] = {}
        self._lock = threading.RLock()

    def reset(self) -> None:
        with self._lock:
            self.messages.clear()

    def enqueue(self, to: str, subject: str, html: str, event: str) -> OutboxMessage:
        with self._lock:
            message = OutboxMessage(
                id=str(uuid.uuid4()),
                to=to,
                subject=subject,
                html=html,
                event=event,
            )
            self.messages[message.id] = message
            return message

    def claim_pending(self) -> list[OutboxMessage]:
        """Mark every pending message as sending and return them, oldest first"""
        with self._lock:
            claimed = [m for m in self.messages.values() if m.status == MessageStatus.PENDING]
            claimed.sort(key=lambda m: m.created_at)
            for message in claimed:
                message.status = MessageStatus.SENDING
                message.attempts += 1
            return claimed

    def mark_sent(self, message: OutboxMessage) -> None:
        with self._lock:
            message.status = MessageStatus.SENT
            message.sent_at = utcnow()
            message.last_error = None

    def mark_failed(self, message: OutboxMessage, error: str, max_attempts: int) -> None:
        """Record a failed attempt; the message is retried until max_attempts"""
        with self._lock:
            message.last_error = error
            if message.attempts >= max_attempts:
                message.status = MessageStatus.FAILED
            else:
                message.status = MessageStatus.PENDING

    def mark_skipped(self, message: OutboxMessage, reason: str) -> None:
        with self._lock:
            message.status = MessageStatus.SKIPPED
            message.last_error = reason

    def list_messages(self, status: Optional[MessageStatus] = None) -> list[OutboxMessage]:
        results = [m for m in self.messages.values() if status is None or m.status == status]
        results.sort(key=lambda m: m.created_at)
        return results


# Singleton instance
outbox_db = OutboxDatabase()
