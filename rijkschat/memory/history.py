"""
Conversation History
====================

In-memory turn history for the active chat session.

- Append-only during normal chat; only ``clear()`` removes turns
- Lives in RAM and is lost when the client exits
- Turns are ordered oldest first

The Conversation Bridge appends the user turn before it contacts the model
backend, so a request that fails still leaves the user turn recorded. The
assistant turn is added only when a reply completes.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

USER = "user"
ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """
    One message in the conversation.

    Attributes:
        role: "user" or "assistant"
        content: The message text
        timestamp: When the turn was recorded
    """
    role: str
    content: str
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the role/content mapping model APIs expect."""
        return {"role": self.role, "content": self.content}


class ConversationHistory:
    """
    Ordered turn history for one session.

    Example:
        history = ConversationHistory()
        history.add_user("find sunflowers")
        history.add_assistant("Here are some paintings of sunflowers...")

        history.to_messages()
        # [{"role": "user", ...}, {"role": "assistant", ...}]

        history.clear()
    """

    def __init__(self):
        self._turns: list[Turn] = []

    def add(self, role: str, content: str) -> Turn:
        """
        Append a turn.

        Raises:
            ValueError: If role is not "user" or "assistant"
        """
        if role not in (USER, ASSISTANT):
            raise ValueError(f"Unsupported role: {role}")
        turn = Turn(role=role, content=content)
        self._turns.append(turn)
        return turn

    def add_user(self, content: str) -> Turn:
        return self.add(USER, content)

    def add_assistant(self, content: str) -> Turn:
        return self.add(ASSISTANT, content)

    @property
    def turns(self) -> list[Turn]:
        """A copy of the turns, oldest first."""
        return list(self._turns)

    def to_messages(self, exclude_last: bool = False) -> list[dict[str, Any]]:
        """
        Format turns for a model API call.

        Args:
            exclude_last: Drop the newest turn, used when that turn is about
                to be replaced by an augmented prompt

        Returns:
            List of role/content dicts
        """
        turns = self._turns[:-1] if exclude_last else self._turns
        return [turn.to_dict() for turn in turns]

    def last(self) -> Turn | None:
        return self._turns[-1] if self._turns else None

    def clear(self) -> None:
        self._turns.clear()

    def __len__(self) -> int:
        return len(self._turns)
