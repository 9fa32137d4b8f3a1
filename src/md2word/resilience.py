"""Retry and safe-mode policy around a Renderer.

Per request:

    Attempting(n) --success--> Done(image)
    Attempting(n) --failure, n < max_retries--> sleep(retry_delay) --> Attempting(n+1)
    Attempting(n) --failure, n == max_retries--> Done(None)

Across requests of one conversion, every failed attempt increments the
shared FailureState and every success resets it. Once the count reaches the
threshold, safe mode is on: requests that start afterwards resolve to None
immediately. Requests already running keep their full retry budget.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from loguru import logger

from md2word.constants import DEFAULT_MAX_RETRIES, DEFAULT_RETRY_DELAY_MS
from md2word.context import ConversionContext
from md2word.errors import RenderError, RenderFailureKind
from md2word.render.adapter import Renderer
from md2word.types import ConversionMetrics, FailureState, RenderRequest, RenderResult


class ResilienceController:
    """Wrap a Renderer with bounded fixed-delay retries and safe mode.

    ``resolve`` never raises: every failure becomes a None result plus a
    logged cause.

    Args:
        renderer: Backend doing the actual rendering
        failure_state: Counters shared by all requests of one conversion
        max_retries: Retries after the first attempt
        retry_delay_ms: Fixed delay between attempts
        metrics: Optional metrics sink
        sleep: Awaitable sleep, injectable for tests
    """

    def __init__(
        self,
        renderer: Renderer,
        failure_state: FailureState,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        metrics: ConversionMetrics | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.renderer = renderer
        self.failure_state = failure_state
        self.max_retries = max_retries
        self.retry_delay_ms = retry_delay_ms
        self.metrics = metrics or ConversionMetrics()
        self._sleep = sleep

    @classmethod
    def for_context(
        cls,
        renderer: Renderer,
        context: ConversionContext,
        **kwargs,
    ) -> ResilienceController:
        """Build a controller bound to a conversion's state and options."""
        return cls(
            renderer,
            context.failure_state,
            max_retries=context.options.max_retries,
            retry_delay_ms=context.options.retry_delay,
            metrics=context.metrics,
            **kwargs,
        )

    @property
    def safe_mode(self) -> bool:
        return self.failure_state.safe_mode

    async def resolve(self, request: RenderRequest) -> RenderResult:
        """Render ``request``, retrying on failure.

        Returns:
            The rendered image, or None when the request could not be rendered
        """
        label = f"{request.kind.value}:{request.source[:40]!r}"

        if self.safe_mode:
            self.metrics.short_circuited += 1
            logger.debug(f"[render] Safe mode on, skipping {label}")
            return None

        self.metrics.count_request(request.kind)
        total_attempts = self.max_retries + 1

        for attempt in range(total_attempts):
            self.metrics.render_attempts += 1
            start_time = time.perf_counter()
            try:
                result = await self.renderer.render(request.with_attempt(attempt))
            except Exception as e:
                self.metrics.add_render_time(request.kind, time.perf_counter() - start_time)
                kind = e.kind if isinstance(e, RenderError) else RenderFailureKind.UNKNOWN
                tripped = self.failure_state.record_failure()
                logger.warning(
                    f"[render] {label} attempt {attempt + 1}/{total_attempts} failed "
                    f"({kind.value}): {e} (failure #{self.failure_state.failure_count})"
                )
                if tripped:
                    logger.warning(
                        f"[render] Too many failures ({self.failure_state.failure_count}), "
                        "enabling safe mode"
                    )
                if attempt < self.max_retries:
                    logger.debug(
                        f"[render] Retrying {label} in {self.retry_delay_ms}ms "
                        f"({attempt + 1}/{self.max_retries})"
                    )
                    await self._sleep(self.retry_delay_ms / 1000)
                continue

            self.metrics.add_render_time(request.kind, time.perf_counter() - start_time)
            self.failure_state.record_success()
            if attempt:
                logger.info(f"[render] {label} succeeded on attempt {attempt + 1}")
            return result

        logger.warning(f"[render] Giving up on {label} after {total_attempts} attempts")
        return None
