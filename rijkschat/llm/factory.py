"""Backend selection from configuration."""

from rijkschat.llm.base import LLMService
from rijkschat.utils.config import LLMConfig
from rijkschat.utils.logger import Logger

logger = Logger("LLMFactory")


def create_llm_service(config: LLMConfig) -> LLMService:
    """
    Create the backend named by config.provider.

    Raises:
        ValueError: For an unknown provider or a missing credential
    """
    provider = config.provider.lower()

    if provider == "ollama":
        from rijkschat.llm.ollama import OllamaService
        service: LLMService = OllamaService(
            model=config.model,
            base_url=config.base_url,
            max_tokens=config.max_tokens,
        )
    elif provider == "claude":
        from rijkschat.llm.claude import ClaudeService
        service = ClaudeService(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            max_tokens=config.max_tokens,
        )
    elif provider == "openai":
        from rijkschat.llm.openai_service import OpenAIService
        service = OpenAIService(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url,
            max_tokens=config.max_tokens,
        )
    else:
        raise ValueError(f"Unknown LLM provider: {config.provider}")

    logger.info(f"Using {provider} backend with model {service.model}")
    return service
