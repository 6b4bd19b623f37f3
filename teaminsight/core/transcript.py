"""Transcript helpers - shape persisted messages for oracle payloads."""

from teaminsight.core.domain_types import MessageRole


def transcript_for_oracle(messages: list[dict] | None) -> list[dict]:
    """Role/text pairs only; timestamps stay server-side."""
    return [
        {"role": m.get("role"), "text": m.get("text", "")}
        for m in messages or []
        if isinstance(m, dict)
    ]


def count_user_messages(messages: list[dict] | None) -> int:
    return sum(
        1 for m in messages or []
        if isinstance(m, dict) and m.get("role") == MessageRole.USER.value
    )
