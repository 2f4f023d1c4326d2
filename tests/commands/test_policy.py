"""Tests for the authorization rules."""

import pytest

from commandbot.core.commands.policy import (
    AuthorizationPolicy,
    can_invoke,
    can_list_in_help,
    passes_bot_gate,
)

MASTERS = frozenset({"master@example.com", "other-master@example.com"})


@pytest.mark.parametrize(
    "sender, bot_public, command_public, expected",
    [
        ("master@example.com", False, False, True),
        ("master@example.com", True, False, True),
        ("other-master@example.com", False, True, True),
        ("anyone@example.com", True, True, True),
        ("anyone@example.com", True, False, False),
        ("anyone@example.com", False, True, False),
        ("anyone@example.com", False, False, False),
    ],
)
def test_can_invoke(sender, bot_public, command_public, expected):
    assert can_invoke(sender, bot_public, command_public, MASTERS) is expected


def test_bot_gate_blocks_strangers_on_private_bot():
    assert passes_bot_gate("anyone@example.com", False, MASTERS) is False
    assert passes_bot_gate("anyone@example.com", True, MASTERS) is True
    assert passes_bot_gate("master@example.com", False, MASTERS) is True


def test_listing_agrees_with_invocation_past_the_bot_gate():
    for bot_public in (True, False):
        for command_public in (True, False):
            for sender in ("master@example.com", "anyone@example.com"):
                if not passes_bot_gate(sender, bot_public, MASTERS):
                    continue
                assert can_list_in_help(sender, command_public, MASTERS) == can_invoke(
                    sender, bot_public, command_public, MASTERS
                )


def test_policy_object_binds_masters_and_bot_flag():
    policy = AuthorizationPolicy(masters=MASTERS, bot_is_public=False)

    assert policy.is_master("master@example.com")
    assert not policy.is_master("anyone@example.com")
    assert policy.can_invoke("master@example.com", command_is_public=False)
    assert not policy.can_invoke("anyone@example.com", command_is_public=True)
    assert policy.can_list_in_help("anyone@example.com", command_is_public=True)
    assert not policy.can_list_in_help("anyone@example.com", command_is_public=False)
