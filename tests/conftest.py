"""Pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from md2word.context import ConversionContext
from md2word.errors import SandboxLaunchError
from md2word.types import RenderedImage, RenderRequest

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent


class StubRenderer:
    """Renderer double that counts calls.

    Fails the first ``fail_times`` calls (all calls if None), then writes a
    small PNG for each request.
    """

    def __init__(self, asset_dir: Path, fail_times: int | None = 0) -> None:
        self.asset_dir = Path(asset_dir)
        self.fail_times = fail_times
        self.calls: list[RenderRequest] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def render(self, request: RenderRequest) -> RenderedImage:
        self.calls.append(request)
        if self.fail_times is None or len(self.calls) <= self.fail_times:
            raise SandboxLaunchError("stub failure")
        filename = f"{request.kind.value}_{len(self.calls)}.png"
        path = self.asset_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", (40, 20), "white").save(path, format="PNG")
        return RenderedImage(path=path, filename=filename)


@pytest.fixture(autouse=True)
def isolated_global_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep user and environment config files out of every test."""
    from md2word import config

    monkeypatch.delenv("MD2WORD_CONFIG", raising=False)
    monkeypatch.setattr(config.ConfigManager, "DEFAULT_USER_CONFIG_DIR", tmp_path / "home")
    monkeypatch.setattr(config, "config_manager", config.ConfigManager())
    return config.config_manager


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Temporary base directory for a conversion."""
    return tmp_path


@pytest.fixture
def context(temp_dir: Path) -> ConversionContext:
    """Conversion context with no retry delay."""
    from md2word.config import ConversionOptions

    return ConversionContext(base_dir=temp_dir, options=ConversionOptions(retryDelay=0))


@pytest.fixture
def stub_renderer(temp_dir: Path) -> StubRenderer:
    """Renderer that always succeeds."""
    return StubRenderer(temp_dir / "temp_images")


@pytest.fixture
def failing_renderer(temp_dir: Path) -> StubRenderer:
    """Renderer that always fails."""
    return StubRenderer(temp_dir / "temp_images", fail_times=None)


@pytest.fixture
def renderer_factory(temp_dir: Path):
    """Build a StubRenderer failing a given number of times."""

    def _make(fail_times: int | None = 0) -> StubRenderer:
        return StubRenderer(temp_dir / "temp_images", fail_times=fail_times)

    return _make


@pytest.fixture
def png_file(temp_dir: Path) -> Path:
    """A 1000x500 PNG image on disk."""
    path = temp_dir / "images" / "wide.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (1000, 500), "blue").save(path, format="PNG")
    return path


@pytest.fixture
def recorded_sleeps() -> list[float]:
    return []


@pytest.fixture
def recording_sleep(recorded_sleeps: list[float]):
    """Sleep replacement that records requested delays."""

    async def _sleep(seconds: float) -> None:
        recorded_sleeps.append(seconds)

    return _sleep
