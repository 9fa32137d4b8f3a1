"""Tests for the Playwright sandbox, with Playwright mocked out."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from md2word.config import SandboxConfig
from md2word.errors import SandboxLaunchError, SandboxTimeoutError, TargetNotFoundError
from md2word.render.sandbox import PlaywrightSandbox, find_chrome_executable

playwright_api = pytest.importorskip("playwright.async_api")


def mock_playwright(page=None, launch_error=None):
    """Build a mocked async_playwright() chain.

    Returns:
        (async_playwright mock, playwright instance, browser)
    """
    page = page or MagicMock()
    page.set_content = AsyncMock()
    page.screenshot = AsyncMock()
    page.close = AsyncMock()

    browser = MagicMock()
    browser.new_page = AsyncMock(return_value=page)
    browser.close = AsyncMock()

    pw = MagicMock()
    pw.chromium.launch = AsyncMock(return_value=browser, side_effect=launch_error)
    pw.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=pw)
    return MagicMock(return_value=starter), pw, browser


@pytest.fixture
def config():
    return SandboxConfig(executable_path="/opt/chrome")


class TestLaunch:
    """Tests for sandbox launch and teardown."""

    @pytest.mark.asyncio
    async def test_context_manager_launches_and_closes(self, config):
        factory, pw, browser = mock_playwright()

        with patch("playwright.async_api.async_playwright", factory):
            async with PlaywrightSandbox(config):
                pass

        kwargs = pw.chromium.launch.call_args.kwargs
        assert kwargs["headless"] is True
        assert kwargs["timeout"] == 30000
        assert kwargs["executable_path"] == "/opt/chrome"
        assert "--no-sandbox" in kwargs["args"]
        browser.close.assert_awaited_once()
        pw.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_launch_failure_raises_and_cleans_up(self, config):
        factory, pw, _ = mock_playwright(launch_error=RuntimeError("no chrome"))

        with patch("playwright.async_api.async_playwright", factory):
            with pytest.raises(SandboxLaunchError, match="no chrome"):
                async with PlaywrightSandbox(config):
                    pass

        pw.stop.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_launch_timeout(self, config):
        factory, _, _ = mock_playwright(
            launch_error=playwright_api.TimeoutError("Timeout 30000ms exceeded")
        )

        with patch("playwright.async_api.async_playwright", factory):
            with pytest.raises(SandboxTimeoutError):
                await PlaywrightSandbox(config).launch()

    @pytest.mark.asyncio
    async def test_screenshot_requires_launch(self, config, temp_dir):
        with pytest.raises(SandboxLaunchError):
            await PlaywrightSandbox(config).screenshot("<p/>", temp_dir / "x.png")


class TestScreenshot:
    """Tests for page capture."""

    @pytest.mark.asyncio
    async def test_element_screenshot(self, config, temp_dir):
        element = MagicMock()
        element.screenshot = AsyncMock()
        page = MagicMock()
        page.query_selector = AsyncMock(return_value=element)
        factory, _, browser = mock_playwright(page)
        output = temp_dir / "out" / "math.png"

        with patch("playwright.async_api.async_playwright", factory):
            async with PlaywrightSandbox(config) as sandbox:
                result = await sandbox.screenshot(
                    "<html/>", output, selector="#formula", viewport=(1200, 800)
                )

        assert result == output
        assert output.parent.is_dir()
        browser.new_page.assert_awaited_once_with(viewport={"width": 1200, "height": 800})
        page.set_content.assert_awaited_once()
        assert page.set_content.call_args.kwargs["wait_until"] == "networkidle"
        element.screenshot.assert_awaited_once_with(path=str(output), type="png")
        page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_target(self, config, temp_dir):
        page = MagicMock()
        page.query_selector = AsyncMock(return_value=None)
        factory, _, _ = mock_playwright(page)

        with patch("playwright.async_api.async_playwright", factory):
            async with PlaywrightSandbox(config) as sandbox:
                with pytest.raises(TargetNotFoundError) as exc_info:
                    await sandbox.screenshot("<html/>", temp_dir / "x.png", selector="#formula")

        assert exc_info.value.selector == "#formula"
        page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_viewport_screenshot_uses_graphic_viewport(self, config, temp_dir):
        factory, _, browser = mock_playwright()

        with patch("playwright.async_api.async_playwright", factory):
            async with PlaywrightSandbox(config) as sandbox:
                await sandbox.screenshot("<svg/>", temp_dir / "svg.png")

        browser.new_page.assert_awaited_once_with(viewport={"width": 800, "height": 600})
        page = browser.new_page.return_value
        page.screenshot.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_page_timeout(self, config, temp_dir):
        page = MagicMock()
        factory, _, _ = mock_playwright(page)
        page.set_content.side_effect = playwright_api.TimeoutError("slow")

        with patch("playwright.async_api.async_playwright", factory):
            async with PlaywrightSandbox(config) as sandbox:
                with pytest.raises(SandboxTimeoutError):
                    await sandbox.screenshot("<html/>", temp_dir / "x.png")

        page.close.assert_awaited_once()


class TestFindChrome:
    """Tests for system browser discovery."""

    def test_env_override(self, tmp_path, monkeypatch):
        chrome = tmp_path / "chrome"
        chrome.write_text("")
        monkeypatch.setenv("MD2WORD_CHROME_PATH", str(chrome))

        assert find_chrome_executable() == str(chrome)

    def test_none_when_nothing_found(self, monkeypatch):
        monkeypatch.delenv("MD2WORD_CHROME_PATH", raising=False)
        monkeypatch.setattr("md2word.render.sandbox._SYSTEM_CHROME_PATHS", {})

        assert find_chrome_executable() is None
