"""Boundary Protocols - the oracle contract between services and infrastructure.

Invariants:
    - Services depend on CompletionClient, never on the anthropic SDK directly
    - complete() returns the reply text; transport failures raise LLMAPIError

Design Decisions:
    - Protocol over ABC: structural subtyping, so the test fake needs no inheritance
"""

from typing import Protocol

from teaminsight.core.errors import ErrorContext


class CompletionClient(Protocol):
    """One system prompt plus one user message in, reply text out."""
    async def complete(
        self,
        *,
        system: str,
        content: str,
        max_tokens: int | None = None,
        context: ErrorContext | None = None,
    ) -> str: ...
