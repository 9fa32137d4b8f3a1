"""Chaos renderer for resilience testing.

Simulates an unreliable rendering backend:
- Random latency (Gaussian distribution)
- Random launch failures, timeouts and missing targets
- Call history and statistics for assertions

Example usage:
    ```python
    from md2word.render.chaos import ChaosConfig, ChaosRenderer

    renderer = ChaosRenderer(asset_dir, ChaosConfig(failure_rate=1.0))
    converter = MarkdownToWordConverter(renderer=renderer)
    result = await converter.convert_markdown("$a+b$")
    assert renderer.stats.failure_count > 0
    ```
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from loguru import logger
from PIL import Image

from md2word.constants import FORMULA_FILE_PREFIX, GRAPHIC_FILE_PREFIX
from md2word.errors import (
    SandboxLaunchError,
    SandboxTimeoutError,
    TargetNotFoundError,
)
from md2word.render.adapter import asset_filename
from md2word.types import RenderedImage, RenderKind, RenderRequest


@dataclass
class ChaosConfig:
    """Configuration for chaos behavior.

    Attributes:
        latency_mean: Mean latency in seconds
        latency_stddev: Standard deviation for latency
        failure_rate: Probability of a launch failure
        timeout_prob: Probability of a timeout
        missing_target_prob: Probability of a missing screenshot target
        image_size: (width, height) of the PNG written on success
        seed: Seed for a private random generator (None = nondeterministic)
    """

    latency_mean: float = 0.0
    latency_stddev: float = 0.0
    failure_rate: float = 0.1
    timeout_prob: float = 0.0
    missing_target_prob: float = 0.0
    image_size: tuple[int, int] = (40, 20)
    seed: int | None = None


@dataclass
class ChaosStats:
    """Statistics for chaos renderer calls."""

    call_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    timeout_count: int = 0
    missing_target_count: int = 0
    history: list[dict[str, Any]] = field(default_factory=list)

    @property
    def total_failures(self) -> int:
        return self.failure_count + self.timeout_count + self.missing_target_count

    @property
    def success_rate(self) -> float:
        """Success rate as percentage."""
        if self.call_count == 0:
            return 100.0
        return (self.success_count / self.call_count) * 100


class ChaosRenderer:
    """Renderer with configurable failures; writes a blank PNG on success."""

    def __init__(self, asset_dir: Path, config: ChaosConfig | None = None) -> None:
        self.asset_dir = Path(asset_dir)
        self.config = config or ChaosConfig()
        self.stats = ChaosStats()
        self._random = random.Random(self.config.seed)

    async def render(self, request: RenderRequest) -> RenderedImage:
        self.stats.call_count += 1
        record: dict[str, Any] = {"kind": request.kind.value, "source": request.source}
        self.stats.history.append(record)

        latency = max(
            0.0, self._random.gauss(self.config.latency_mean, self.config.latency_stddev)
        )
        if latency:
            await asyncio.sleep(latency)

        if self._random.random() < self.config.timeout_prob:
            self.stats.timeout_count += 1
            record["outcome"] = "timeout"
            raise SandboxTimeoutError("Chaos: simulated timeout")

        if self._random.random() < self.config.failure_rate:
            self.stats.failure_count += 1
            record["outcome"] = "failure"
            raise SandboxLaunchError("Chaos: simulated launch failure")

        if self._random.random() < self.config.missing_target_prob:
            self.stats.missing_target_count += 1
            record["outcome"] = "missing_target"
            raise TargetNotFoundError("#formula")

        prefix = (
            FORMULA_FILE_PREFIX if request.kind is RenderKind.FORMULA else GRAPHIC_FILE_PREFIX
        )
        filename = asset_filename(prefix)
        path = self.asset_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", self.config.image_size, "white").save(path, format="PNG")

        self.stats.success_count += 1
        record["outcome"] = "success"
        logger.debug(f"Chaos: rendered {request.kind.value} to {path}")
        return RenderedImage(path=path, filename=filename)
