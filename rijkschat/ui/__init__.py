"""
Presentation Boundary
=====================

Events out, commands in:
- events: typed events for the renderer
- handlers: command dispatcher wired to the agent
- console: terminal front-end
"""

from rijkschat.ui.handlers import CommandDispatcher, register_handlers

__all__ = ["CommandDispatcher", "register_handlers"]
