"""In-memory session history with a bounded message count."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

ROLES = ("user", "assistant", "tool")


@dataclass
class Message:
    """Represents a single conversation message."""

    role: str  # 'user', 'assistant', 'tool'
    content: str
    timestamp: datetime = field(default_factory=datetime.now)
    tool_calls: Optional[List[Dict[str, Any]]] = None
    tool_call_id: Optional[str] = None

    def to_llm_format(self) -> Dict[str, Any]:
        """Convert to an OpenAI chat message."""
        message: Dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            message["tool_calls"] = self.tool_calls
        if self.tool_call_id:
            message["tool_call_id"] = self.tool_call_id
        return message


class SessionHistory:
    """Ordered, size-bounded list of role-tagged messages.

    Messages are only recorded while the session is active. Stopping a
    session keeps its messages until it is cleared.
    """

    def __init__(self, max_size: int = 20, active: bool = False):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = max_size
        self._messages: List[Message] = []
        self.active = active
        self.started_at: Optional[datetime] = datetime.now() if active else None

    @property
    def max_size(self) -> int:
        return self._max_size

    @max_size.setter
    def max_size(self, value: int):
        if value < 1:
            raise ValueError("max_size must be at least 1")
        self._max_size = value
        self._trim()

    def start(self, reset: bool = False):
        """Activate the session, optionally discarding earlier messages."""
        if reset:
            self._messages.clear()
        if not self.active or reset:
            self.started_at = datetime.now()
        self.active = True
        logger.debug("Session started (reset=%s)", reset)

    def stop(self):
        """Deactivate the session; messages are kept."""
        self.active = False
        logger.debug("Session stopped with %d message(s)", len(self._messages))

    def clear(self):
        self._messages.clear()

    def add(self, message: Message) -> bool:
        """Append a message if the session is active. Returns True if stored."""
        if not self.active:
            return False
        if message.role not in ROLES:
            raise ValueError(f"Unsupported role: {message.role}")
        self._messages.append(message)
        self._trim()
        return True

    def add_message(
        self,
        role: str,
        content: str,
        tool_calls: Optional[List[Dict[str, Any]]] = None,
        tool_call_id: Optional[str] = None,
    ) -> bool:
        """Add a message to the session."""
        return self.add(
            Message(
                role=role,
                content=content or "",
                tool_calls=tool_calls,
                tool_call_id=tool_call_id,
            )
        )

    def _trim(self):
        dropped = 0
        while len(self._messages) > self._max_size:
            self._messages.pop(0)
            dropped += 1
        # A tool result without its assistant tool-call message is invalid
        while self._messages and self._messages[0].role == "tool":
            self._messages.pop(0)
            dropped += 1
        if dropped:
            logger.debug("Dropped %d message(s) from session history", dropped)

    def get_messages(self) -> List[Dict[str, Any]]:
        """Get the session messages in LLM format, oldest first."""
        return [message.to_llm_format() for message in self._messages]

    @property
    def messages(self) -> List[Message]:
        return list(self._messages)

    def get_info(self) -> Dict[str, Any]:
        """Summary of the session state."""
        counts = {role: 0 for role in ROLES}
        for message in self._messages:
            counts[message.role] += 1
        return {
            "active": self.active,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "message_count": len(self._messages),
            "max_size": self._max_size,
            "roles": counts,
        }

    def __len__(self) -> int:
        return len(self._messages)
