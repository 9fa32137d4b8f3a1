"""Regex substitution with asynchronous replacement functions."""

from __future__ import annotations

import asyncio
import re
from collections.abc import Awaitable, Callable

AsyncReplacer = Callable[[re.Match[str]], Awaitable[str]]


async def replace_async(
    text: str,
    pattern: re.Pattern[str] | str,
    replacer: AsyncReplacer,
) -> str:
    """Replace every match of ``pattern`` with the awaited result of ``replacer``.

    All replacements run concurrently. Results are spliced back in the
    original left-to-right match order, independent of which coroutine
    finishes first. An exception raised by any replacer propagates; callers
    that need partial failure handle errors inside the replacer.

    Args:
        text: Input text
        pattern: Compiled regex or pattern string
        replacer: Coroutine function called once per match

    Returns:
        Text with all matches replaced
    """
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    matches = list(regex.finditer(text))
    if not matches:
        return text

    replacements = await asyncio.gather(*(replacer(m) for m in matches))

    parts: list[str] = []
    last_end = 0
    for match, replacement in zip(matches, replacements):
        parts.append(text[last_end : match.start()])
        parts.append(replacement)
        last_end = match.end()
    parts.append(text[last_end:])
    return "".join(parts)
