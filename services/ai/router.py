import logging

from services.ai.base import Rewriter
from services.ai.claude_service import ClaudeRewriter
from services.ai.gemini_service import GeminiRewriter
from services.ai.http_providers import HuggingFaceRewriter, PerplexityRewriter
from services.ai.openai_service import OpenAIRewriter

logger = logging.getLogger(__name__)

PROVIDER_ALLOW = ("gemini", "openai", "claude", "huggingface", "perplexity")


def create_rewriter(config) -> Rewriter:
    """시작 시 한 번: 설정의 REWRITE_PROVIDER 로 provider 하나를 고른다"""
    provider = (config.get("REWRITE_PROVIDER") or "gemini").strip().lower()
    timeout = float(config.get("PROVIDER_TIMEOUT_SECONDS") or 30)

    if provider == "openai":
        rewriter = OpenAIRewriter(config.get("OPENAI_API_KEY"), model=config.get("OPENAI_MODEL") or "gpt-4o",
                                  timeout=timeout)
    elif provider == "gemini":
        rewriter = GeminiRewriter(config.get("GEMINI_API_KEY"), model=config.get("GEMINI_MODEL") or "gemini-2.5-flash")
    elif provider == "claude":
        rewriter = ClaudeRewriter(config.get("ANTHROPIC_API_KEY"),
                                  model=config.get("CLAUDE_MODEL") or "claude-sonnet-4-5-20250929")
    elif provider == "huggingface":
        rewriter = HuggingFaceRewriter(config.get("HUGGINGFACE_API_KEY"),
                                       model=config.get("HUGGINGFACE_MODEL") or "mistralai/Mixtral-8x7B-Instruct-v0.1",
                                       timeout=timeout)
    elif provider == "perplexity":
        rewriter = PerplexityRewriter(config.get("PERPLEXITY_API_KEY"),
                                      model=config.get("PERPLEXITY_MODEL") or "llama-3.1-sonar-small-128k-online",
                                      timeout=timeout)
    else:
        raise ValueError(f"Unknown REWRITE_PROVIDER '{provider}', expected one of: {list(PROVIDER_ALLOW)}")

    logger.info("rewrite provider selected: %s (%s)", rewriter.name, rewriter.model)
    return rewriter
