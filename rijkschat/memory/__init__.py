"""
Session Memory
==============

Process-local state of one chat session:

1. HISTORY: The user/assistant turns sent to the model backend
2. RECENT: Artworks returned by recent tool calls

Neither layer is persisted; both are lost when the client exits.

Usage:
    from rijkschat.memory import ConversationHistory, RecentResults

    history = ConversationHistory()
    history.add_user("find sunflowers")

    recent = RecentResults()
    recent.upsert(artwork)
"""

from rijkschat.memory.history import ConversationHistory, Turn
from rijkschat.memory.recent import RecentResults

__all__ = ["ConversationHistory", "Turn", "RecentResults"]
