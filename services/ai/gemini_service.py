# gemini.py
import logging
from typing import Optional

from google import genai
from google.genai import types

from services.ai.base import Rewriter, RewriteProviderError, CREDENTIALS, as_provider_error
from services.ai.output_postprocess import _strip_quotes
from services.ai.prompts import VALIDATION_PROMPT, build_prompt

logger = logging.getLogger(__name__)


class GeminiRewriter(Rewriter):
    """Google Gemini 모델로 문체 변환"""

    name = "gemini"

    def __init__(self, api_key: Optional[str], model: str = "gemini-2.5-flash", client=None):
        self.model = model
        self.client = client
        if self.client is None and api_key:
            self.client = genai.Client(api_key=api_key)

    def _client(self):
        if self.client is None:
            raise RewriteProviderError(self.name, "GEMINI_API_KEY is not configured.", CREDENTIALS)
        return self.client

    def rewrite(self, original_text, from_style, to_style, preservation_percentage=50):
        client = self._client()
        system_prompt, user_prompt = build_prompt(original_text, from_style, to_style, preservation_percentage)
        try:
            resp = client.models.generate_content(
                model=self.model,
                contents=user_prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system_prompt,
                    temperature=0.7,
                ),
            )
        except Exception as e:
            raise as_provider_error(self.name, e) from e
        return _strip_quotes(self._non_empty(getattr(resp, "text", "")))

    def validate_credentials(self) -> bool:
        if self.client is None:
            logger.warning("[Gemini] GEMINI_API_KEY is not set")
            return False

        def _ping():
            resp = self.client.models.generate_content(model=self.model, contents=VALIDATION_PROMPT)
            self._non_empty(getattr(resp, "text", ""))

        return self._validate(_ping)
