"""
Agent System
============

Orchestration between the user, the Rijksmuseum tools and the model:

- IntentMatcher / TriggerPhraseMatcher: picks a tool for a message
- ContextAssembler: calls the tool and formats its result
- DirectActionExtractor: handles "show image of X" style commands
- ConversationBridge: history, prompt assembly and streamed replies
- Agent: wires the pieces together for one session
"""

from rijkschat.agent.actions import ActionResult, DirectActionExtractor
from rijkschat.agent.context import ContextAssembler, ContextResult
from rijkschat.agent.core import Agent, ConversationBridge, build_prompt
from rijkschat.agent.intent import IntentMatcher, ToolMatch, TriggerPhraseMatcher

__all__ = [
    "ActionResult",
    "Agent",
    "ContextAssembler",
    "ContextResult",
    "ConversationBridge",
    "DirectActionExtractor",
    "IntentMatcher",
    "ToolMatch",
    "TriggerPhraseMatcher",
    "build_prompt",
]
