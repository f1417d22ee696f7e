import logging
from typing import Optional

from openai import OpenAI

from services.ai.base import Rewriter, RewriteProviderError, CREDENTIALS, as_provider_error
from services.ai.prompts import VALIDATION_PROMPT, build_prompt

logger = logging.getLogger(__name__)


class OpenAIRewriter(Rewriter):
    name = "openai"

    def __init__(self, api_key: Optional[str], model: str = "gpt-4o", timeout: float = 30.0, client=None):
        self.model = model
        self.client = client
        if self.client is None and api_key:
            self.client = OpenAI(api_key=api_key, timeout=timeout)

    def _client(self):
        if self.client is None:
            raise RewriteProviderError(self.name, "OPENAI_API_KEY is not configured.", CREDENTIALS)
        return self.client

    def rewrite(self, original_text, from_style, to_style, preservation_percentage=50):
        client = self._client()
        system_prompt, user_prompt = build_prompt(original_text, from_style, to_style, preservation_percentage)
        try:
            completion = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0.7,
                max_tokens=500,
            )
        except Exception as e:
            raise as_provider_error(self.name, e) from e

        choices = getattr(completion, "choices", None) or []
        content = getattr(getattr(choices[0], "message", None), "content", None) if choices else None
        usage = getattr(completion, "usage", None)
        if usage:
            logger.debug("[OpenAI] model=%s total_tokens=%s", self.model, getattr(usage, "total_tokens", None))
        return self._non_empty(content)

    def validate_credentials(self) -> bool:
        if self.client is None:
            logger.warning("[OpenAI] OPENAI_API_KEY is not set")
            return False
        return self._validate(lambda: self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": VALIDATION_PROMPT}],
            max_tokens=5,
        ))
