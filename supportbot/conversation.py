"""Widget state: message history, typing simulation, open/minimised flags.

All mutation goes through the transition methods on :class:`ChatWidget`.
The bot reply is delivered by a scheduler after a fixed delay; while it is
pending the widget refuses new submissions, so at most one reply is ever
outstanding.
"""

import itertools
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .resolver import ResponseResolver
from .scheduling import Cancellable, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_REPLY_DELAY = 1.5  # seconds


class Sender(str, Enum):
    USER = "user"
    BOT = "bot"


@dataclass(frozen=True)
class Message:
    id: int
    text: str
    sender: Sender
    timestamp: datetime

    @property
    def display_time(self) -> str:
        return self.timestamp.strftime("%H:%M")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "sender": self.sender.value,
            "timestamp": self.timestamp.isoformat(),
            "time": self.display_time,
        }


class ChatWidget:
    def __init__(
        self,
        resolver: ResponseResolver,
        scheduler: Scheduler,
        *,
        reply_delay: float = DEFAULT_REPLY_DELAY,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.resolver = resolver
        self.skin = resolver.skin
        self._scheduler = scheduler
        self._reply_delay = reply_delay
        self._clock = clock
        self._ids = itertools.count(1)
        self._messages: List[Message] = []
        self._pending: Optional[Cancellable] = None
        self._disposed = False

        self.input_text = ""
        self.is_typing = False
        self.is_open = False
        self.is_minimized = False

        self._append(self.skin.greeting, Sender.BOT)

    # --------- read side ----------
    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    @property
    def can_send(self) -> bool:
        return bool(self.input_text.strip()) and not self.is_typing and not self._disposed

    @property
    def disposed(self) -> bool:
        return self._disposed

    def snapshot(self) -> Dict[str, Any]:
        return {
            "skin": self.skin.name,
            "title": self.skin.title,
            "status_line": self.skin.status_line,
            "footer_note": self.skin.footer_note,
            "quick_actions": [
                {"key": a.key, "label": a.label, "query": a.query} for a in self.skin.quick_actions
            ],
            "messages": [m.to_dict() for m in self._messages],
            "is_typing": self.is_typing,
            "is_open": self.is_open,
            "is_minimized": self.is_minimized,
            "input": self.input_text,
            "can_send": self.can_send,
        }

    # --------- transitions ----------
    def set_input(self, text: str) -> None:
        self.input_text = text or ""

    def submit(self, text: Optional[str] = None) -> Optional[Message]:
        """Post a user message and schedule the bot reply.

        With no ``text`` the pending input buffer is sent. Blank input, a
        reply still pending, or a disposed widget make this a no-op that
        returns ``None``.
        """
        text = (self.input_text if text is None else text or "").strip()
        if not text or self._disposed:
            return None
        if self.is_typing:
            logger.warning("Submission ignored while a reply is pending")
            return None

        message = self._append(text, Sender.USER)
        self.input_text = ""
        self.is_typing = True
        self._pending = self._scheduler.call_later(self._reply_delay, self._deliver_reply, text)
        return message

    def quick_action(self, key: str) -> Optional[Message]:
        return self.submit(self.skin.quick_action(key).query)

    def toggle_open(self) -> bool:
        self.is_open = not self.is_open
        if self.is_open:
            self.is_minimized = False
        return self.is_open

    def toggle_minimize(self) -> bool:
        if self.is_open:
            self.is_minimized = not self.is_minimized
        return self.is_minimized

    def dispose(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self.is_typing = False
        self._disposed = True

    # --------- internals ----------
    def _append(self, text: str, sender: Sender) -> Message:
        message = Message(id=next(self._ids), text=text, sender=sender, timestamp=self._clock())
        self._messages.append(message)
        return message

    def _deliver_reply(self, text: str) -> None:
        self._pending = None
        if self._disposed:
            return
        self._append(self.resolver.resolve(text), Sender.BOT)
        self.is_typing = False
