"""
Providers reached over plain HTTPS with requests (no vendor SDK).
"""

import logging
from typing import Any, Dict, Optional

import requests

from services.ai.base import (
    Rewriter,
    RewriteProviderError,
    UPSTREAM,
    kind_for_status,
)
from services.ai.output_postprocess import _clean_output
from services.ai.prompts import build_prompt

logger = logging.getLogger(__name__)

HUGGINGFACE_URL = "https://router.huggingface.co/models/{model}"
PERPLEXITY_URL = "https://api.perplexity.ai/chat/completions"


class _HttpRewriter(Rewriter):
    env_name = ""

    def __init__(self, api_key: Optional[str], model: str, timeout: float = 30.0):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._require_key(self.api_key, self.env_name)}",
            "Content-Type": "application/json",
        }

    def _post(self, url: str, body: Dict[str, Any]) -> Any:
        headers = self._headers()
        try:
            r = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise RewriteProviderError(self.name, f"request failed: {e}", UPSTREAM) from e

        if not r.ok:
            logger.error("[%s] API error status=%s body=%s", self.name, r.status_code, r.text[:500])
            raise RewriteProviderError(
                self.name,
                f"API error: {r.status_code} {r.reason}",
                kind_for_status(r.status_code),
                r.status_code,
            )
        try:
            return r.json()
        except ValueError as e:
            raise RewriteProviderError(self.name, "invalid JSON response", UPSTREAM, r.status_code) from e

    def validate_credentials(self) -> bool:
        if not self.api_key:
            logger.warning("[%s] %s is not set", self.name, self.env_name)
            return False
        return self._validate(self._ping)

    def _ping(self):
        raise NotImplementedError


class HuggingFaceRewriter(_HttpRewriter):
    name = "huggingface"
    env_name = "HUGGINGFACE_API_KEY"

    def __init__(self, api_key, model="mistralai/Mixtral-8x7B-Instruct-v0.1", timeout=30.0):
        super().__init__(api_key, model, timeout)

    @property
    def url(self) -> str:
        return HUGGINGFACE_URL.format(model=self.model)

    def rewrite(self, original_text, from_style, to_style, preservation_percentage=50):
        _, user_prompt = build_prompt(original_text, from_style, to_style, preservation_percentage)
        data = self._post(self.url, {
            "inputs": user_prompt,
            "parameters": {
                "max_new_tokens": 500,
                "temperature": 0.7,
                "top_p": 0.95,
                "do_sample": True,
            },
        })
        # 모델마다 응답 형식이 다름: [{"generated_text": ...}] 또는 {"generated_text": ...}
        if isinstance(data, list) and data and isinstance(data[0], dict):
            text = data[0].get("generated_text")
        elif isinstance(data, dict):
            text = data.get("generated_text")
        else:
            text = data if isinstance(data, str) else None
        return _clean_output(self._non_empty(text), prompt=user_prompt)

    def _ping(self):
        self._post(self.url, {"inputs": "Hello", "parameters": {"max_new_tokens": 5}})


class PerplexityRewriter(_HttpRewriter):
    name = "perplexity"
    env_name = "PERPLEXITY_API_KEY"

    def __init__(self, api_key, model="llama-3.1-sonar-small-128k-online", timeout=30.0):
        super().__init__(api_key, model, timeout)

    def _chat(self, messages, **params):
        return self._post(PERPLEXITY_URL, {"model": self.model, "messages": messages, **params})

    def rewrite(self, original_text, from_style, to_style, preservation_percentage=50):
        system_prompt, user_prompt = build_prompt(original_text, from_style, to_style, preservation_percentage)
        data = self._chat(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.2,
            max_tokens=1000,
            top_p=0.9,
            presence_penalty=0,
            frequency_penalty=1,
        )
        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            text = None
        return self._non_empty(text)

    def _ping(self):
        self._chat([{"role": "user", "content": "Hello"}], max_tokens=5)
