"""
QuillMind Backend — Abstract LLM Service Interface
====================================================

What:  Abstract base class for the generative text provider.
How:   Concrete providers inherit from LLMService and implement generate().
Who:   Called by TextActionService once an action has been mapped to a prompt.
"""

from abc import ABC, abstractmethod


class LLMService(ABC):
    """
    Contract:
        - generate() accepts a complete prompt and returns the generated text
        - Implementations handle their own retry logic and error translation
        - Provider errors surface as UpstreamError (or CircuitBreakerOpenError)
        - Callers never need to know which provider is in use

    Implementations:
        - GeminiService: Google Gemini (default)
        - Test doubles: AsyncMock(spec=LLMService)
    """

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """
        Send `prompt` to the model and return its text output.

        Returns:
            str: The non-empty generated text.

        Raises:
            UpstreamError: The call failed after all retries, or the response
                carried no usable text. `upstream_status` is set when the
                provider reported an HTTP status.
            CircuitBreakerOpenError: Too many consecutive failures; the
                provider is not called at all.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is reachable and the API key is accepted.

        Does not consume generation quota.
        """
        ...
