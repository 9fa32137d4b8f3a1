"""Playwright sandbox for rasterizing HTML.

One Chromium process is launched per ``async with PlaywrightSandbox()``
block and closed on every exit path. There is no browser pool: each render
request gets a fresh, isolated process.

Usage:
    async with PlaywrightSandbox(config) as sandbox:
        await sandbox.screenshot(html, output_path, selector="#formula")
"""

from __future__ import annotations

import os
import sys
from importlib.util import find_spec
from pathlib import Path
from typing import Any

from loguru import logger

from md2word.config import SandboxConfig
from md2word.errors import (
    SandboxLaunchError,
    SandboxTimeoutError,
    TargetNotFoundError,
)

# System browsers preferred over Playwright's bundled Chromium
_SYSTEM_CHROME_PATHS: dict[str, list[str]] = {
    "darwin": [
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        "/Applications/Chromium.app/Contents/MacOS/Chromium",
    ],
    "linux": [
        "/usr/bin/google-chrome-stable",
        "/usr/bin/google-chrome",
        "/usr/bin/chromium-browser",
        "/usr/bin/chromium",
    ],
    "win32": [
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
    ],
}


def is_playwright_available() -> bool:
    """Check if playwright is installed."""
    return find_spec("playwright") is not None


def find_chrome_executable() -> str | None:
    """Find a system Chrome/Chromium executable.

    Returns:
        Executable path, or None to let Playwright use its bundled Chromium
    """
    env_path = os.environ.get("MD2WORD_CHROME_PATH")
    if env_path and Path(env_path).exists():
        return env_path

    for candidate in _SYSTEM_CHROME_PATHS.get(sys.platform, []):
        if Path(candidate).exists():
            logger.debug(f"Found Chrome at: {candidate}")
            return candidate
    return None


class PlaywrightSandbox:
    """Single-use headless Chromium instance."""

    def __init__(self, config: SandboxConfig | None = None) -> None:
        self.config = config or SandboxConfig()
        self._playwright: Any = None
        self._browser: Any = None

    async def __aenter__(self) -> PlaywrightSandbox:
        await self.launch()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def launch(self) -> None:
        """Start Playwright and launch Chromium.

        Raises:
            SandboxTimeoutError: Launch exceeded the configured timeout
            SandboxLaunchError: Playwright or Chromium failed to start
        """
        try:
            from playwright.async_api import TimeoutError as PlaywrightTimeoutError
            from playwright.async_api import async_playwright
        except ImportError as e:
            raise SandboxLaunchError(f"playwright is not installed: {e}") from e

        try:
            self._playwright = await async_playwright().start()
        except Exception as e:
            raise SandboxLaunchError(f"Failed to start Playwright: {e}") from e

        launch_options: dict[str, Any] = {
            "headless": True,
            "timeout": self.config.launch_timeout_ms,
            "args": list(self.config.args),
        }
        executable_path = self.config.executable_path or find_chrome_executable()
        if executable_path:
            launch_options["executable_path"] = executable_path

        try:
            self._browser = await self._playwright.chromium.launch(**launch_options)
        except PlaywrightTimeoutError as e:
            await self.close()
            raise SandboxTimeoutError(
                f"Chromium launch timed out after {self.config.launch_timeout_ms}ms"
            ) from e
        except Exception as e:
            await self.close()
            raise SandboxLaunchError(
                f"Failed to launch Chromium browser: {e}. "
                "Install browser with: playwright install chromium"
            ) from e
        logger.debug("Sandbox browser launched")

    async def screenshot(
        self,
        html: str,
        output_path: Path,
        *,
        selector: str | None = None,
        viewport: tuple[int, int] | None = None,
    ) -> Path:
        """Load ``html`` and write a PNG screenshot to ``output_path``.

        Args:
            html: Self-contained HTML document
            output_path: Destination PNG path
            selector: Element to capture; None captures the viewport
            viewport: (width, height) of the page

        Returns:
            output_path

        Raises:
            SandboxLaunchError: The sandbox was not launched
            SandboxTimeoutError: Loading or capturing timed out
            TargetNotFoundError: ``selector`` matched no element
        """
        if self._browser is None:
            raise SandboxLaunchError("Sandbox browser is not running")

        from playwright.async_api import TimeoutError as PlaywrightTimeoutError

        width, height = viewport or (
            self.config.graphic_viewport_width,
            self.config.graphic_viewport_height,
        )
        output_path.parent.mkdir(parents=True, exist_ok=True)

        page = await self._browser.new_page(viewport={"width": width, "height": height})
        try:
            await page.set_content(
                html,
                wait_until=self.config.wait_for,
                timeout=self.config.launch_timeout_ms,
            )
            if selector:
                element = await page.query_selector(selector)
                if element is None:
                    raise TargetNotFoundError(selector)
                await element.screenshot(path=str(output_path), type="png")
            else:
                await page.screenshot(path=str(output_path), type="png", full_page=False)
        except PlaywrightTimeoutError as e:
            raise SandboxTimeoutError(f"Sandbox page timed out: {e}") from e
        finally:
            await page.close()

        return output_path

    async def close(self) -> None:
        """Close browser and playwright instances."""
        if self._browser is not None:
            try:
                await self._browser.close()
            except Exception as e:
                logger.debug(f"Error closing sandbox browser: {e}")
            self._browser = None
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.debug(f"Error stopping playwright: {e}")
            self._playwright = None
