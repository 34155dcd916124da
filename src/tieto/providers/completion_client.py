"""
Completion endpoint client.

Forwards an assembled RAG prompt to a llama.cpp-style `/completion`
endpoint and returns the generated `content`.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

from ..core.exceptions import CompletionError


logger = logging.getLogger(__name__)


@dataclass
class CompletionResponse:
    """
    Response from the completion endpoint.

    Attributes:
        content: Generated text
        raw_response: Full response JSON
        tokens_predicted: Tokens generated (if reported)
        tokens_evaluated: Prompt tokens evaluated (if reported)
    """
    content: str
    raw_response: Optional[Dict[str, Any]] = None
    tokens_predicted: Optional[int] = None
    tokens_evaluated: Optional[int] = None


class CompletionClient:
    """
    HTTP client for a completion endpoint.

    Request body: `{"prompt": ..., "temperature": ..., "n_predict": ...}`.
    Response body must carry a string `content` field.
    """

    def __init__(
        self,
        url: str,
        temperature: float = 0.2,
        n_predict: int = 512,
        timeout: float = 120.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.temperature = temperature
        self.n_predict = n_predict
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_payload(self, prompt: str, **kwargs) -> Dict[str, Any]:
        """Request body for a prompt; kwargs override defaults."""
        payload = {
            "prompt": prompt,
            "temperature": self.temperature,
            "n_predict": self.n_predict,
        }
        payload.update(kwargs)
        return payload

    def complete(self, prompt: str, **kwargs) -> CompletionResponse:
        """
        Generate text for a prompt.

        Raises:
            CompletionError: On connection failure, timeout, non-success
                status, or a response without `content`
        """
        payload = self.build_payload(prompt, **kwargs)
        logger.debug(f"Making completion request to {self.url}")

        try:
            response = self.session.post(
                self.url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise CompletionError(
                f"Completion request timed out after {self.timeout}s: {e}",
                url=self.url,
            ) from e
        except requests.RequestException as e:
            raise CompletionError(
                f"Failed to connect to completion endpoint at {self.url}: {e}",
                url=self.url,
            ) from e

        if not 200 <= response.status_code < 300:
            logger.error(f"HTTP error from completion endpoint: {response.status_code}")
            raise CompletionError(
                f"Completion endpoint error: {response.status_code} - {response.text[:500]}",
                url=self.url,
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise CompletionError(
                f"Invalid JSON response from completion endpoint: {e}",
                url=self.url,
                status_code=response.status_code,
            ) from e

        content = result.get("content") if isinstance(result, dict) else None
        if not isinstance(content, str):
            raise CompletionError(
                "Completion response is missing a 'content' string",
                url=self.url,
                status_code=response.status_code,
            )

        return CompletionResponse(
            content=content,
            raw_response=result,
            tokens_predicted=result.get("tokens_predicted"),
            tokens_evaluated=result.get("tokens_evaluated"),
        )
