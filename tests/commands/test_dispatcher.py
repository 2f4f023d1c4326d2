"""Tests for CommandDispatcher."""

from __future__ import annotations

import asyncio
import time

import pytest

from commandbot.core.commands.dispatcher import CommandDispatcher, extract_arguments
from commandbot.core.commands.policy import AuthorizationPolicy
from commandbot.core.commands.registry import CommandRegistry

MASTER = "master@example.com"
STRANGER = "anyone@example.com"


def _dispatcher(bot_is_public: bool = False, handler_timeout=None):
    registry = CommandRegistry()
    policy = AuthorizationPolicy(masters=frozenset({MASTER}), bot_is_public=bot_is_public)
    return registry, CommandDispatcher(registry, policy, handler_timeout=handler_timeout)


class TestExtractArguments:
    def test_no_arguments(self):
        assert extract_arguments("rand") == ""

    def test_everything_after_first_token(self):
        assert extract_arguments("puts hello   big world") == "hello   big world"

    def test_leading_whitespace_ignored(self):
        assert extract_arguments("  puts  hello ") == "hello"


class TestCommandDispatcher:
    """Tests for CommandDispatcher."""

    @pytest.mark.asyncio
    async def test_puts_scenario(self):
        registry, dispatcher = _dispatcher()
        registry.register("puts <string>", "Write", r"puts\s+.+", lambda sender, arg: f"'{arg}' written")

        print("\n INPUT: dispatch(master, 'puts hello')")
        reply = await dispatcher.dispatch(MASTER, "puts hello")
        print(f" OUTPUT: {reply}")
        assert reply == "'hello' written"

        assert await dispatcher.dispatch(STRANGER, "puts hello") is None

    @pytest.mark.asyncio
    async def test_private_bot_drops_every_stranger_message(self):
        registry, dispatcher = _dispatcher(bot_is_public=False)
        registry.register("rand", "Random", r"rand", lambda sender, arg: "4", is_public=True)

        for text in ("rand", "help", "frobnicate", ""):
            assert await dispatcher.dispatch(STRANGER, text) is None

    @pytest.mark.asyncio
    async def test_unknown_command_reply(self):
        _, dispatcher = _dispatcher()

        reply = await dispatcher.dispatch(MASTER, "  frobnicate  ")
        print(f"\n OUTPUT: {reply}")
        assert "'frobnicate'" in reply
        assert "help" in reply

    @pytest.mark.asyncio
    async def test_first_match_wins_regardless_of_specificity(self):
        registry, dispatcher = _dispatcher()
        calls = []
        registry.register("any <text>", "Catch all", r".+", lambda s, a: calls.append("A") or "A")
        registry.register("exact", "Specific", r"exact", lambda s, a: calls.append("B") or "B")

        assert await dispatcher.dispatch(MASTER, "exact") == "A"
        assert calls == ["A"]

    @pytest.mark.asyncio
    async def test_pattern_must_match_entire_text(self):
        registry, dispatcher = _dispatcher()
        registry.register("rand", "Random", r"rand", lambda s, a: "7")

        assert await dispatcher.dispatch(MASTER, "rand") == "7"
        reply = await dispatcher.dispatch(MASTER, "random")
        assert reply.startswith("I don't understand")

    @pytest.mark.asyncio
    async def test_alias_equivalence(self):
        registry, dispatcher = _dispatcher(bot_is_public=True)
        seen = []

        def handler(sender, args):
            seen.append((sender, args))
            return "rolled"

        registry.register("rand", "Random", r"rand", handler, is_public=True, aliases=[("r", r"r")])

        assert await dispatcher.dispatch("anyone", "rand") == "rolled"
        assert await dispatcher.dispatch("anyone", "r") == "rolled"
        assert seen == [("anyone", ""), ("anyone", "")]

    @pytest.mark.asyncio
    async def test_alias_receives_same_argument_extraction(self):
        registry, dispatcher = _dispatcher()
        seen = []
        registry.register(
            "say <text>",
            "Say",
            r"say\s+.+",
            lambda s, a: seen.append(a),
            aliases=[("s <text>", r"s\s+.+")],
        )

        await dispatcher.dispatch(MASTER, "say hi there")
        await dispatcher.dispatch(MASTER, "s hi there")
        assert seen == ["hi there", "hi there"]

    @pytest.mark.asyncio
    async def test_master_only_command_hidden_from_strangers_on_public_bot(self):
        registry, dispatcher = _dispatcher(bot_is_public=True)
        registry.register("secret", "Master only", r"secret", lambda s, a: "classified")

        reply = await dispatcher.dispatch(STRANGER, "secret")
        assert reply.startswith("I don't understand 'secret'")
        assert await dispatcher.dispatch(MASTER, "secret") == "classified"

    @pytest.mark.asyncio
    async def test_unauthorized_spec_skipped_for_later_match(self):
        registry, dispatcher = _dispatcher(bot_is_public=True)
        registry.register("ping", "Private ping", r"ping", lambda s, a: "private")
        registry.register("ping!", "Public ping", r"ping", lambda s, a: "public", is_public=True)

        assert await dispatcher.dispatch(MASTER, "ping") == "private"
        assert await dispatcher.dispatch(STRANGER, "ping") == "public"

    @pytest.mark.asyncio
    async def test_handler_returning_none_means_no_reply(self):
        registry, dispatcher = _dispatcher()
        registry.register("quiet", "Quiet", r"quiet", lambda s, a: None)

        assert await dispatcher.dispatch(MASTER, "quiet") is None

    @pytest.mark.asyncio
    async def test_coroutine_handler_is_awaited(self):
        registry, dispatcher = _dispatcher()

        async def handler(sender, args):
            await asyncio.sleep(0)
            return f"async {args}"

        registry.register("go <x>", "Async", r"go\s+.+", handler)

        assert await dispatcher.dispatch(MASTER, "go fast") == "async fast"

    @pytest.mark.asyncio
    async def test_handler_failure_yields_no_reply(self, caplog):
        registry, dispatcher = _dispatcher()

        def boom(sender, args):
            raise RuntimeError("kaboom")

        registry.register("boom", "Fails", r"boom", boom)

        assert await dispatcher.dispatch(MASTER, "boom") is None
        assert "Command boom failed" in caplog.text

    @pytest.mark.asyncio
    async def test_handler_timeout_yields_no_reply(self):
        registry, dispatcher = _dispatcher(handler_timeout=0.05)

        async def slow(sender, args):
            await asyncio.sleep(5)
            return "too late"

        registry.register("slow", "Slow", r"slow", slow)

        assert await dispatcher.dispatch(MASTER, "slow") is None

    @pytest.mark.asyncio
    async def test_non_string_result_is_stringified(self):
        registry, dispatcher = _dispatcher()
        registry.register("answer", "Answer", r"answer", lambda s, a: 42)

        assert await dispatcher.dispatch(MASTER, "answer") == "42"

    @pytest.mark.asyncio
    async def test_timed_out_plain_handler_finishes_before_dispatch_returns(self, caplog):
        registry, dispatcher = _dispatcher(handler_timeout=0.05)
        finished = []

        def slow(sender, args):
            time.sleep(0.2)
            finished.append(args)
            return "too late"

        registry.register("slow", "Slow", r"slow", slow)

        assert await dispatcher.dispatch(MASTER, "slow") is None
        assert finished == [""]
        assert "timed out" in caplog.text
