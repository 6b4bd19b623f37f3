"""Interviewer - phrases the controller's directive as the next student-facing message.

Invariants:
    - Never returns an empty string: empty replies become FALLBACK_CONTINUATION
    - A confidently non-Hebrew reply is retried once, then replaced by the fallback
    - Oracle transport errors propagate (no partial turn is persisted)
"""

import json
import logging

from teaminsight.core.controller_parsing import NextDirective, NextIntent, directive_to_intent
from teaminsight.core.domain_types import OracleRole
from teaminsight.core.errors import ErrorContext, oracle_context
from teaminsight.core.language_check import is_language_mismatch
from teaminsight.core.language_strings import FALLBACK_CONTINUATION, LANGUAGE_RETRY_NUDGE
from teaminsight.core.llm_protocol import CompletionClient
from teaminsight.core.topics import topics_payload
from teaminsight.core.transcript import transcript_for_oracle
from teaminsight.services.reflection_prompts import INTERVIEWER_PROMPT

logger = logging.getLogger(__name__)


async def render_next_message(
    client: CompletionClient,
    *,
    transcript: list[dict],
    directive: NextDirective,
    intent: NextIntent | None = None,
    locale: str = "he",
    context: ErrorContext | None = None,
) -> str:
    """Assistant text for the next turn, in the session locale."""
    payload = json.dumps(
        {
            "messages": transcript_for_oracle(transcript),
            "nextDirective": directive.to_payload(),
            "nextIntent": (intent or directive_to_intent(directive)).to_payload(),
            "topics": topics_payload(),
        },
        ensure_ascii=False,
    )
    call_context = oracle_context(context, OracleRole.INTERVIEWER.value)
    text = (await client.complete(
        system=INTERVIEWER_PROMPT, content=payload, context=call_context,
    )).strip()

    if text and is_language_mismatch(text, locale):
        logger.warning(
            "Interviewer replied in the wrong language, retrying once",
            extra={"oracle": OracleRole.INTERVIEWER.value, "session_id": call_context.session_id},
        )
        text = (await client.complete(
            system=INTERVIEWER_PROMPT,
            content=f"{payload}\n\n{LANGUAGE_RETRY_NUDGE}",
            context=call_context,
        )).strip()
        if is_language_mismatch(text, locale):
            text = ""

    if not text:
        logger.warning(
            "Interviewer reply unusable, using fallback continuation",
            extra={"oracle": OracleRole.INTERVIEWER.value, "session_id": call_context.session_id},
        )
        return FALLBACK_CONTINUATION
    return text
