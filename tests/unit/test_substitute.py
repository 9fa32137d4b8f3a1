"""Tests for asynchronous regex substitution."""

import asyncio
import re

import pytest

from md2word.substitute import replace_async

DISPLAY = re.compile(r"\$\$([\s\S]*?)\$\$")


class TestReplaceAsync:
    """Tests for replace_async."""

    @pytest.mark.asyncio
    async def test_preserves_match_order_when_resolved_in_reverse(self):
        """Later matches finishing first must not reorder the output."""
        started: list[str] = []
        release: dict[str, asyncio.Event] = {}

        async def replacer(match: re.Match[str]) -> str:
            value = match.group(1)
            started.append(value)
            release[value] = asyncio.Event()
            await release[value].wait()
            return f"[{value}]"

        async def release_in_reverse():
            while len(started) < 2:
                await asyncio.sleep(0)
            release["2"].set()
            await asyncio.sleep(0)
            release["1"].set()

        result, _ = await asyncio.gather(
            replace_async("A $$1$$ B $$2$$ C", DISPLAY, replacer),
            release_in_reverse(),
        )
        assert result == "A [1] B [2] C"

    @pytest.mark.asyncio
    async def test_no_matches_returns_input(self):
        """Text without matches is returned unchanged and the replacer never runs."""
        calls = []

        async def replacer(match):
            calls.append(match)
            return "x"

        assert await replace_async("plain text", DISPLAY, replacer) == "plain text"
        assert calls == []

    @pytest.mark.asyncio
    async def test_accepts_pattern_string(self):
        """A pattern string is compiled on the fly."""

        async def replacer(match):
            return match.group(0).upper()

        assert await replace_async("a-b-c", r"[ab]", replacer) == "A-B-c"

    @pytest.mark.asyncio
    async def test_replacer_exception_propagates(self):
        """Errors raised by the replacer are not swallowed."""

        async def replacer(match):
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await replace_async("$$1$$", DISPLAY, replacer)

    @pytest.mark.asyncio
    async def test_replacers_run_concurrently(self):
        """All replacers are started before any of them completes."""
        in_flight = 0
        peak = 0

        async def replacer(match):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return "x"

        await replace_async("$$1$$ $$2$$ $$3$$", DISPLAY, replacer)
        assert peak == 3
