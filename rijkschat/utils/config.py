"""
Configuration Management
========================

All environment variables the client reads are declared and validated
here. A ``.env`` file in the working directory (or any parent) is loaded
first, so local development needs no exported variables.

Required settings fail fast: a missing RIJKSMUSEUM_API_KEY, MCP_SERVER_PATH
or the credential of the selected model backend stops the client before a
tool-provider process is started.

Usage:
    from rijkschat.utils.config import get_config

    config = get_config()
    print(config.llm.provider)
    print(config.mcp.server_path)
"""

import os
from dataclasses import dataclass
from typing import Callable, TypeVar

from dotenv import load_dotenv

from rijkschat.utils.logger import Logger

logger = Logger("Config")

N = TypeVar("N", int, float)


def _required(name: str) -> str:
    """
    Read an environment variable that must be set.

    Raises:
        ValueError: If the variable is missing or blank
    """
    value = (os.getenv(name) or "").strip()
    if not value:
        raise ValueError(f"Missing required environment variable: {name} (set it in your .env file)")
    return value


def _optional(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


def _number(name: str, default: N, cast: Callable[[str], N]) -> N:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}, not a number; using {default}")
        return default


@dataclass(frozen=True)
class LLMConfig:
    """Model backend selection and credentials."""
    provider: str            # "ollama", "claude" or "openai"
    model: str
    api_key: str | None      # Required for claude and openai
    base_url: str | None     # Ollama server, or an OpenAI-compatible endpoint
    max_tokens: int


@dataclass(frozen=True)
class MCPConfig:
    """How to launch the Rijksmuseum tool provider."""
    server_command: str       # Interpreter, e.g. "node"
    server_path: str          # Provider script
    rijksmuseum_api_key: str  # Forwarded to the provider process


@dataclass(frozen=True)
class ToolConfig:
    """Retry policy for tool calls."""
    max_retries: int          # Extra attempts after a 500 response
    retry_delay_seconds: float


@dataclass(frozen=True)
class Config:
    """
    Everything the client needs to start.

    Access via:
        config = get_config()
        config.llm.model
        config.tools.max_retries
    """
    llm: LLMConfig
    mcp: MCPConfig
    tools: ToolConfig
    log_level: str


# provider -> (model variable, default model, key variable, base URL variable, default base URL)
_PROVIDERS: dict[str, tuple[str, str, str | None, str, str | None]] = {
    "ollama": ("OLLAMA_MODEL", "mistral", None, "OLLAMA_BASE_URL", "http://localhost:11434"),
    "claude": ("CLAUDE_MODEL", "claude-3-opus-20240229", "CLAUDE_API_KEY", "CLAUDE_BASE_URL", None),
    "openai": ("OPENAI_MODEL", "gpt-4-turbo-preview", "OPENAI_API_KEY", "OPENAI_BASE_URL", None),
}

SUPPORTED_PROVIDERS = tuple(_PROVIDERS)


def _load_llm_config() -> LLMConfig:
    provider = _optional("LLM_PROVIDER", "ollama").lower()
    if provider not in _PROVIDERS:
        raise ValueError(
            f"Unknown LLM provider: {provider}. "
            f"Set LLM_PROVIDER to one of: {', '.join(SUPPORTED_PROVIDERS)}"
        )

    model_var, default_model, key_var, url_var, default_url = _PROVIDERS[provider]
    return LLMConfig(
        provider=provider,
        model=_optional(model_var, default_model),
        api_key=_required(key_var) if key_var else None,
        base_url=os.getenv(url_var) or default_url,
        max_tokens=_number("LLM_MAX_TOKENS", 1024, int),
    )


def load_config() -> Config:
    """
    Read and validate the configuration.

    Raises:
        ValueError: If a required setting is missing or invalid
    """
    load_dotenv()

    return Config(
        llm=_load_llm_config(),
        mcp=MCPConfig(
            server_command=_optional("MCP_SERVER_COMMAND", "node"),
            server_path=_required("MCP_SERVER_PATH"),
            rijksmuseum_api_key=_required("RIJKSMUSEUM_API_KEY"),
        ),
        tools=ToolConfig(
            max_retries=max(0, _number("TOOL_MAX_RETRIES", 3, int)),
            retry_delay_seconds=max(0.0, _number("TOOL_RETRY_DELAY_SECONDS", 1.0, float)),
        ),
        log_level=_optional("LOG_LEVEL", "info"),
    )


_config: Config | None = None


def get_config() -> Config:
    """Return the process-wide configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration; the next get_config() reads the environment again."""
    global _config
    _config = None
