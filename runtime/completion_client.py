"""
Completion Client

Thin wrapper around the Anthropic Messages API. Sends one request and returns
the first text block plus token usage. Errors from the SDK (auth, rate limit,
network) are not caught here; they reach the caller unchanged.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import anthropic

logger = logging.getLogger(__name__)


@dataclass
class TokenUsage:
    """Track token usage across completion calls"""
    input_tokens: int = 0
    output_tokens: int = 0
    requests: int = 0

    def add_usage(self, usage_data):
        """Add usage from Claude API response"""
        self.requests += 1
        if hasattr(usage_data, 'input_tokens'):
            self.input_tokens += usage_data.input_tokens or 0
        if hasattr(usage_data, 'output_tokens'):
            self.output_tokens += usage_data.output_tokens or 0

    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def to_dict(self) -> Dict[str, int]:
        return {
            "input": self.input_tokens,
            "output": self.output_tokens,
            "total": self.total_tokens(),
            "requests": self.requests,
        }


@dataclass
class Completion:
    """Text and usage of a single completion"""
    text: str
    usage: Any = None
    model: Optional[str] = None
    stop_reason: Optional[str] = None


def first_text_block(response) -> str:
    """Text of the first text-typed content block, or an empty string"""
    for block in getattr(response, 'content', None) or []:
        if getattr(block, 'type', None) == 'text':
            return block.text or ''
    return ''


class CompletionClient:
    """
    Async facade over the synchronous Anthropic client.

    The blocking SDK call runs in the default executor so the event loop
    keeps serving other agents while a request is in flight.
    """

    def __init__(self, api_key: str):
        self.client = anthropic.Anthropic(api_key=api_key)
        self.usage = TokenUsage()

    async def complete(self, system: str, messages: List[Dict[str, str]], model: str,
                       max_tokens: int, temperature: float) -> Completion:
        """
        Request a completion.

        Args:
            system: System prompt
            messages: Ordered [{role, content}] conversation
            model: Model identifier
            max_tokens: Output token budget
            temperature: Sampling temperature

        Returns:
            Completion with the reply text
        """
        loop = asyncio.get_running_loop()
        t_start = time.time()

        response = await loop.run_in_executor(
            None,
            lambda: self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                system=system,
                messages=messages,
            )
        )

        usage = getattr(response, 'usage', None)
        if usage is not None:
            self.usage.add_usage(usage)
            logger.info(f"TOKEN-TRACKING: input={getattr(usage, 'input_tokens', 0)}, output={getattr(usage, 'output_tokens', 0)}")

        logger.info(f"COMPLETION-TIMING: {model} call took {int((time.time() - t_start) * 1000)} ms")

        return Completion(
            text=first_text_block(response),
            usage=usage,
            model=getattr(response, 'model', model),
            stop_reason=getattr(response, 'stop_reason', None),
        )
