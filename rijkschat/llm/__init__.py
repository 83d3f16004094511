"""
Model Backends
==============

Pluggable language-model backends behind one interface:

- OllamaService: local models through Ollama's HTTP API
- ClaudeService: Anthropic's Claude
- OpenAIService: OpenAI or any compatible server

``create_llm_service`` picks one from configuration.
"""

from rijkschat.llm.base import LLMService, StreamCallbacks, StreamError
from rijkschat.llm.factory import create_llm_service

__all__ = ["LLMService", "StreamCallbacks", "StreamError", "create_llm_service"]
