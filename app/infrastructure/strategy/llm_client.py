"""
OpenRouter chat-completions client.

Sends a system + user prompt pair and returns the parsed JSON object
the model replied with. Models sometimes wrap JSON in markdown fences
or prose; the first ``{...}`` block is extracted.
"""

import json
import logging
import re
from typing import Any, Optional

import requests

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL)


class LLMClientError(Exception):
    """Raised when the completion call fails or the reply is not JSON."""


def extract_json(content: str) -> dict[str, Any]:
    """Parse the JSON object contained in a model reply."""
    text = content.strip()
    fenced = _FENCE.search(text)
    if fenced:
        text = fenced.group(1).strip()
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        raise LLMClientError("Model reply contains no JSON object")
    try:
        parsed = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise LLMClientError(f"Model reply is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise LLMClientError("Model reply is not a JSON object")
    return parsed


class OpenRouterClient:
    """Minimal JSON-mode client for an OpenAI-compatible chat endpoint."""

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str],
        model: str,
        temperature: float = 0.3,
        max_tokens: int = 1500,
        timeout: float = 30.0,
    ) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def complete_json(self, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        """Run one completion and return the JSON object it contains.

        Raises:
            LLMClientError: On missing key, transport failure or bad reply.
        """
        if not self.is_configured:
            raise LLMClientError("LLM API key is not configured")

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
        }

        try:
            response = requests.post(
                url=self.api_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                data=json.dumps(payload),
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
            content = result["choices"][0]["message"]["content"]
        except requests.RequestException as e:
            logger.error("LLM request failed: %s", e)
            raise LLMClientError(f"LLM request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("Unexpected LLM response shape: %s", e)
            raise LLMClientError("Unexpected LLM response shape") from e

        if not content:
            raise LLMClientError("LLM returned an empty reply")
        return extract_json(content)
