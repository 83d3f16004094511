"""
RijksChat - Conversational Rijksmuseum Client
=============================================

A chat client for exploring the Rijksmuseum collection. Questions are
answered by a pluggable language model (Ollama, Claude or OpenAI), and
relevant messages are enriched with data from the Rijksmuseum tool
provider, an MCP server reached over stdio.

This package provides:
- Tool registry, invoker and result formatters for the MCP provider
- Rule-based intent matching and context assembly
- Streaming conversation bridge with per-session history
- Console front-end standing in for the desktop window
"""

__version__ = "1.0.0"
