"""Configuration management for md2word."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from md2word.constants import (
    CONFIG_FILENAME,
    DEFAULT_FONT,
    DEFAULT_FONT_SIZE,
    DEFAULT_FORMULA_VIEWPORT_HEIGHT,
    DEFAULT_FORMULA_VIEWPORT_WIDTH,
    DEFAULT_GRAPHIC_VIEWPORT_HEIGHT,
    DEFAULT_GRAPHIC_VIEWPORT_WIDTH,
    DEFAULT_LOG_DIR,
    DEFAULT_LOG_LEVEL,
    DEFAULT_LOG_RETENTION,
    DEFAULT_LOG_ROTATION,
    DEFAULT_MARGIN_TWIPS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PAGE_SIZE,
    DEFAULT_RETRY_DELAY_MS,
    DEFAULT_SANDBOX_ARGS,
    DEFAULT_SANDBOX_LAUNCH_TIMEOUT_MS,
    DEFAULT_SANDBOX_WAIT_FOR,
)
from md2word.errors import ConfigError


class Margins(BaseModel):
    """Page margins in twips (1/1440 inch)."""

    top: int = Field(default=DEFAULT_MARGIN_TWIPS, ge=0)
    right: int = Field(default=DEFAULT_MARGIN_TWIPS, ge=0)
    bottom: int = Field(default=DEFAULT_MARGIN_TWIPS, ge=0)
    left: int = Field(default=DEFAULT_MARGIN_TWIPS, ge=0)


class ConversionOptions(BaseModel):
    """Per-conversion feature toggles and layout settings.

    Accepts both the snake_case field names and the camelCase keys used by
    the JSON option record (``mathToImage``, ``retryDelay``...).
    """

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    render_math: bool = Field(default=True, alias="renderMath")
    math_to_image: bool = Field(default=True, alias="mathToImage")
    render_svg: bool = Field(default=True, alias="renderSvg")
    safe_mode_enabled: bool = Field(default=False, alias="safeModeEnabled")
    max_retries: int = Field(default=DEFAULT_MAX_RETRIES, ge=0, alias="maxRetries")
    retry_delay: int = Field(
        default=DEFAULT_RETRY_DELAY_MS, ge=0, alias="retryDelay"
    )  # milliseconds
    page_size: Literal["A4", "A3", "A5", "LETTER", "LEGAL"] = Field(
        default=DEFAULT_PAGE_SIZE, alias="pageSize"
    )
    margins: Margins = Field(default_factory=Margins)
    font: str = DEFAULT_FONT
    font_size: int = Field(
        default=DEFAULT_FONT_SIZE, ge=1, alias="fontSize"
    )  # half-points

    @property
    def math_enabled(self) -> bool:
        """Whether formula passes should run at all."""
        return self.render_math and self.math_to_image


class SandboxConfig(BaseModel):
    """Headless Chromium settings for formula/graphic screenshots."""

    launch_timeout_ms: int = Field(default=DEFAULT_SANDBOX_LAUNCH_TIMEOUT_MS, ge=1)
    wait_for: Literal["load", "domcontentloaded", "networkidle"] = (
        DEFAULT_SANDBOX_WAIT_FOR
    )
    formula_viewport_width: int = DEFAULT_FORMULA_VIEWPORT_WIDTH
    formula_viewport_height: int = DEFAULT_FORMULA_VIEWPORT_HEIGHT
    graphic_viewport_width: int = DEFAULT_GRAPHIC_VIEWPORT_WIDTH
    graphic_viewport_height: int = DEFAULT_GRAPHIC_VIEWPORT_HEIGHT
    executable_path: str | None = None  # None = auto-detect, then bundled Chromium
    args: list[str] = Field(default_factory=lambda: list(DEFAULT_SANDBOX_ARGS))


class LogConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = DEFAULT_LOG_LEVEL
    dir: str | None = DEFAULT_LOG_DIR
    rotation: str = DEFAULT_LOG_ROTATION
    retention: str = DEFAULT_LOG_RETENTION


class Md2WordConfig(BaseModel):
    """Main configuration model."""

    conversion: ConversionOptions = Field(default_factory=ConversionOptions)
    sandbox: SandboxConfig = Field(default_factory=SandboxConfig)
    log: LogConfig = Field(default_factory=LogConfig)


class ConfigManager:
    """Configuration manager for loading config files."""

    CONFIG_FILENAME = CONFIG_FILENAME
    DEFAULT_USER_CONFIG_DIR = Path.home() / ".md2word"

    def __init__(self) -> None:
        self._config: Md2WordConfig | None = None
        self._config_path: Path | None = None

    @property
    def config(self) -> Md2WordConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self._config = self.load()
        return self._config

    @property
    def config_path(self) -> Path | None:
        """Get the path of the loaded configuration file."""
        return self._config_path

    def load(
        self,
        config_path: Path | str | None = None,
        env_override: bool = True,
    ) -> Md2WordConfig:
        """
        Load configuration from file with fallback chain.

        Priority (highest to lowest):
        1. Explicit config_path parameter
        2. MD2WORD_CONFIG environment variable
        3. ./md2word.json (current directory)
        4. ~/.md2word/config.json (user directory)
        5. Default values
        """
        config_data: dict[str, Any] = {}

        resolved_path = self._resolve_config_path(config_path, env_override)
        self._config_path = None
        if resolved_path and resolved_path.exists():
            config_data = self._load_json(resolved_path)
            self._config_path = resolved_path

        try:
            self._config = Md2WordConfig.model_validate(config_data)
        except ValidationError as e:
            raise ConfigError(resolved_path or Path("<defaults>"), str(e)) from e
        return self._config

    def _resolve_config_path(
        self,
        config_path: Path | str | None,
        env_override: bool,
    ) -> Path | None:
        """Resolve configuration file path based on priority."""
        if config_path:
            return Path(config_path)

        if env_override:
            env_path = os.environ.get("MD2WORD_CONFIG")
            if env_path:
                return Path(env_path)

        cwd_config = Path.cwd() / self.CONFIG_FILENAME
        if cwd_config.exists():
            return cwd_config

        user_config = self.DEFAULT_USER_CONFIG_DIR / "config.json"
        if user_config.exists():
            return user_config

        return None

    def _load_json(self, path: Path) -> dict[str, Any]:
        """Load JSON configuration file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(path, str(e)) from e
        if not isinstance(data, dict):
            raise ConfigError(path, "top-level value must be an object")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-separated key path.

        Example: config_manager.get("conversion.max_retries")
        """
        value: Any = self.config
        for part in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, part, None)
            elif isinstance(value, dict):
                value = value.get(part)
            else:
                return default

            if value is None:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value by dot-separated key path.

        Example: config_manager.set("conversion.math_to_image", False)
        """
        parts = key.split(".")
        parent: Any = self.config
        for part in parts[:-1]:
            if isinstance(parent, BaseModel):
                parent = getattr(parent, part)
            elif isinstance(parent, dict):
                parent = parent[part]

        final_key = parts[-1]
        if isinstance(parent, BaseModel):
            setattr(parent, final_key, value)
        elif isinstance(parent, dict):
            parent[final_key] = value


# Global config manager instance
config_manager = ConfigManager()


def get_config() -> Md2WordConfig:
    """Get the global configuration."""
    return config_manager.config
