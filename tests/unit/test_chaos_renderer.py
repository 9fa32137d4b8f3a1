"""Tests for ChaosRenderer."""

import pytest
from PIL import Image

from md2word.errors import SandboxLaunchError, SandboxTimeoutError, TargetNotFoundError
from md2word.render.chaos import ChaosConfig, ChaosRenderer, ChaosStats
from md2word.types import RenderRequest


class TestChaosConfig:
    """Tests for ChaosConfig dataclass."""

    def test_default_values(self):
        """Test default configuration values."""
        config = ChaosConfig()
        assert config.latency_mean == 0.0
        assert config.failure_rate == 0.1
        assert config.timeout_prob == 0.0
        assert config.missing_target_prob == 0.0
        assert config.image_size == (40, 20)


class TestChaosStats:
    """Tests for ChaosStats dataclass."""

    def test_initial_stats(self):
        stats = ChaosStats()
        assert stats.call_count == 0
        assert stats.total_failures == 0
        assert stats.success_rate == 100.0

    def test_success_rate(self):
        stats = ChaosStats(call_count=10, success_count=8, failure_count=2)
        assert stats.success_rate == 80.0


class TestChaosRenderer:
    """Tests for ChaosRenderer behavior."""

    @pytest.mark.asyncio
    async def test_success_writes_png(self, temp_dir):
        renderer = ChaosRenderer(temp_dir, ChaosConfig(failure_rate=0.0, image_size=(30, 10)))

        image = await renderer.render(RenderRequest.formula("x"))

        assert image.filename.startswith("math_")
        with Image.open(image.path) as img:
            assert img.size == (30, 10)
        assert renderer.stats.success_count == 1
        assert renderer.stats.history[0]["outcome"] == "success"

    @pytest.mark.asyncio
    async def test_graphic_prefix(self, temp_dir):
        renderer = ChaosRenderer(temp_dir, ChaosConfig(failure_rate=0.0))

        image = await renderer.render(RenderRequest.graphic("<svg/>"))

        assert image.filename.startswith("svg_")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "config,error",
        [
            (ChaosConfig(failure_rate=1.0), SandboxLaunchError),
            (ChaosConfig(timeout_prob=1.0), SandboxTimeoutError),
            (ChaosConfig(failure_rate=0.0, missing_target_prob=1.0), TargetNotFoundError),
        ],
    )
    async def test_failure_modes(self, temp_dir, config, error):
        renderer = ChaosRenderer(temp_dir, config)

        with pytest.raises(error):
            await renderer.render(RenderRequest.formula("x"))

        assert renderer.stats.total_failures == 1

    @pytest.mark.asyncio
    async def test_seed_makes_outcomes_reproducible(self, temp_dir):
        async def outcomes():
            renderer = ChaosRenderer(temp_dir, ChaosConfig(failure_rate=0.5, seed=42))
            for _ in range(20):
                try:
                    await renderer.render(RenderRequest.formula("x"))
                except SandboxLaunchError:
                    pass
            return [h["outcome"] for h in renderer.stats.history]

        assert await outcomes() == await outcomes()
