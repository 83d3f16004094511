"""
Utilities Module
================

Shared helpers:
- logger: Context-prefixed console logging
- config: Environment-backed configuration
"""

from rijkschat.utils.logger import Logger, logger
from rijkschat.utils.config import get_config, Config

__all__ = ["Logger", "logger", "get_config", "Config"]
