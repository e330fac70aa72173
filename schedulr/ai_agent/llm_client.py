"""
LLM client for Schedulr study suggestions
"""
import logging
import time
from typing import Dict, Any, Optional

from openai import OpenAI, OpenAIError

from schedulr.config.settings import Config
from schedulr.exceptions import SuggestionGenerationError

logger = logging.getLogger(__name__)


class LLMClient:
    """Structured-output client for an OpenAI-compatible chat completions endpoint"""

    def __init__(self, model_name: str = None, client: OpenAI = None):
        self.config = Config()
        self.model_config = self.config.get_model_config(model_name)
        self.model_name = self.model_config["model"]
        self.max_tokens = self.model_config["max_tokens"]
        self.temperature = self.model_config["temperature"]

        api_key = self.model_config["api_key"]
        if not api_key and client is None:
            logger.warning("No API key configured (set GEMINI_API_KEY or SCHEDULR_API_KEY)")

        self.client = client or OpenAI(
            api_key=api_key or "NULL",
            base_url=self.model_config["base_url"],
            timeout=self.config.LLM_TIMEOUT,
            max_retries=self.config.LLM_MAX_RETRIES
        )

        self._total_requests = 0
        self._failed_requests = 0

        logger.info(f"Initialized LLM client: {self.model_name} @ {self.model_config['base_url']}")

    def generate_json(self, prompt: str, schema: Dict[str, Any],
                      schema_name: str = "response") -> Optional[str]:
        """Send a single prompt constrained to a JSON schema.

        Returns the raw response text, or None when the service answered
        without content. Transport and API failures raise
        SuggestionGenerationError.
        """
        self._total_requests += 1
        start_time = time.time()

        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": schema}
                }
            )
        except OpenAIError as e:
            self._failed_requests += 1
            logger.error(f"LLM request failed ({self.model_name}): {e}")
            raise SuggestionGenerationError(self.config.GENERATION_FAILED_MESSAGE) from e

        logger.info(f"{self.model_name} response: {time.time() - start_time:.2f}s")

        if not response.choices:
            return None
        return response.choices[0].message.content

    def get_stats(self) -> Dict[str, Any]:
        return {
            "model": self.model_name,
            "total_requests": self._total_requests,
            "failed_requests": self._failed_requests,
        }
