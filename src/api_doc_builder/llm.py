"""LLM client wrapper around litellm.

Used by processors that enrich operations with generated text.
"""

from litellm import acompletion

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class LlmClient:
    """Wrapper for LLM API calls via litellm."""

    def __init__(self, model: str | None = None):
        self.model = model or DEFAULT_MODEL

    def _messages(self, system: str, user: str) -> list[dict]:
        return [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ]

    async def acall(self, system: str, user: str) -> str:
        """Send a system+user message to the LLM and return the response text."""
        response = await acompletion(model=self.model, messages=self._messages(system, user))
        return response.choices[0].message.content
