"""Tests for reflection policy value objects."""

import dataclasses

import pytest

from teaminsight.core.policy import (
    DEFAULT_PROFILE,
    DEFAULT_PROFILE_KEY,
    EffectivePolicy,
    ProfileSnapshot,
    needs_snapshot_backfill,
    normalize_profile_key,
)


def _policy():
    profile = ProfileSnapshot(
        key="strict", title="Strict",
        controller_addendum="Push for evidence.", evaluator_addendum="Score harshly.",
        green_min=85, red_max=55,
    )
    return EffectivePolicy(profile_key="strict", weekly_instructions="Focus on testing", profile=profile)


def test_default_profile_thresholds():
    assert DEFAULT_PROFILE.key == DEFAULT_PROFILE_KEY
    assert DEFAULT_PROFILE.green_min == 75
    assert DEFAULT_PROFILE.red_max == 45


def test_policy_is_immutable():
    with pytest.raises(dataclasses.FrozenInstanceError):
        _policy().weekly_instructions = "changed"


def test_controller_payload_carries_controller_addendum_only():
    payload = _policy().controller_payload()
    assert payload["profile"]["controllerAddendum"] == "Push for evidence."
    assert "evaluatorAddendum" not in payload["profile"]
    assert payload["weeklyInstructions"] == "Focus on testing"


def test_evaluator_payload_carries_evaluator_addendum_only():
    payload = _policy().evaluator_payload()
    assert payload["profile"]["evaluatorAddendum"] == "Score harshly."
    assert "controllerAddendum" not in payload["profile"]


def test_normalize_profile_key():
    assert normalize_profile_key("  strict ") == "strict"
    assert normalize_profile_key("") == DEFAULT_PROFILE_KEY
    assert normalize_profile_key(None) == DEFAULT_PROFILE_KEY


def test_needs_snapshot_backfill():
    assert needs_snapshot_backfill(None, None)
    assert needs_snapshot_backfill("default", None)
    assert needs_snapshot_backfill("", "")
    assert not needs_snapshot_backfill("default", "")
