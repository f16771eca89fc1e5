"""Claude API client wrapper with retry logic and token tracking.

Transient failures (rate limits, connection errors, 5xx) are retried with
exponential backoff; client errors are raised immediately.
"""

import logging
import time

from anthropic import Anthropic, APIConnectionError, APIError, RateLimitError

from config_loader import get_anthropic_api_key

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"

DEFAULT_SYSTEM = (
    "You are an expert career coach and ATS resume writer. "
    "Answer with the requested content only, without preamble."
)


class ClaudeClient:
    """Wrapper for Claude API with retry logic and token tracking."""

    def __init__(self, model: str | None = None):
        """Initialize the Claude client.

        Args:
            model: Optional model override. Defaults to DEFAULT_MODEL.
        """
        self.client = Anthropic(api_key=get_anthropic_api_key())
        self.model = model or DEFAULT_MODEL
        self.total_input_tokens = 0
        self.total_output_tokens = 0

    def complete(
        self,
        user: str,
        system: str = DEFAULT_SYSTEM,
        max_tokens: int = 1500,
        temperature: float = 0.7,
        retry_count: int = 3,
        retry_delay: float = 1.0,
    ) -> str:
        """Make a Claude API call with retry logic.

        Args:
            user: User message content
            system: System prompt
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature
            retry_count: Number of attempts on transient failures
            retry_delay: Initial delay between retries (doubles on each retry)

        Returns:
            The stripped text content of Claude's response

        Raises:
            APIError: If all retries fail
        """
        last_error = None
        delay = retry_delay

        for attempt in range(retry_count):
            try:
                response = self.client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=[{"role": "user", "content": user}],
                )

                self.total_input_tokens += response.usage.input_tokens
                self.total_output_tokens += response.usage.output_tokens

                return response.content[0].text.strip()

            except RateLimitError as e:
                last_error = e
                if attempt < retry_count - 1:
                    logger.warning("Rate limited, waiting %ss...", delay)
                    time.sleep(delay)
                    delay *= 2

            except APIConnectionError as e:
                last_error = e
                if attempt < retry_count - 1:
                    logger.warning("Connection error, retrying in %ss...", delay)
                    time.sleep(delay)
                    delay *= 2

            except APIError as e:
                # 4xx other than 429 will not succeed on retry
                status_code = getattr(e, "status_code", None)
                if status_code and 400 <= status_code < 500 and status_code != 429:
                    raise
                last_error = e
                if attempt < retry_count - 1:
                    logger.warning("API error (%s), retrying in %ss...", status_code, delay)
                    time.sleep(delay)
                    delay *= 2

        raise last_error

    def get_token_usage(self) -> dict[str, int]:
        """Get cumulative token usage for this client instance.

        Returns:
            Dictionary with input_tokens, output_tokens, and total_tokens
        """
        return {
            "input_tokens": self.total_input_tokens,
            "output_tokens": self.total_output_tokens,
            "total_tokens": self.total_input_tokens + self.total_output_tokens,
        }

    def reset_token_usage(self) -> None:
        """Reset token usage counters."""
        self.total_input_tokens = 0
        self.total_output_tokens = 0
