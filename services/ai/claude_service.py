import logging
from typing import Optional

import anthropic

from services.ai.base import Rewriter, RewriteProviderError, CREDENTIALS, as_provider_error
from services.ai.output_postprocess import _strip_quotes
from services.ai.prompts import VALIDATION_PROMPT, build_prompt

logger = logging.getLogger(__name__)


def _as_text_from_claude_result(message) -> str:
    """messages.create(...) 반환값에서 첫 text 블록만 꺼낸다"""
    for block in getattr(message, "content", None) or []:
        if getattr(block, "type", None) == "text":
            return getattr(block, "text", "") or ""
    return ""


class ClaudeRewriter(Rewriter):
    name = "claude"

    def __init__(self, api_key: Optional[str], model: str = "claude-sonnet-4-5-20250929", client=None):
        self.model = model
        self.client = client
        if self.client is None and api_key:
            self.client = anthropic.Anthropic(api_key=api_key)

    def _client(self):
        if self.client is None:
            raise RewriteProviderError(self.name, "ANTHROPIC_API_KEY is not configured.", CREDENTIALS)
        return self.client

    def rewrite(self, original_text, from_style, to_style, preservation_percentage=50):
        client = self._client()
        system_prompt, user_prompt = build_prompt(original_text, from_style, to_style, preservation_percentage)
        try:
            message = client.messages.create(
                model=self.model,
                max_tokens=1024,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except Exception as e:
            raise as_provider_error(self.name, e) from e
        return _strip_quotes(self._non_empty(_as_text_from_claude_result(message)))

    def validate_credentials(self) -> bool:
        if self.client is None:
            logger.warning("[Claude] ANTHROPIC_API_KEY is not set")
            return False
        return self._validate(lambda: self.client.messages.create(
            model=self.model,
            max_tokens=5,
            messages=[{"role": "user", "content": VALIDATION_PROMPT}],
        ))
