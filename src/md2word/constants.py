"""Centralized constants for md2word.

This module contains all hardcoded constants used throughout the codebase.
Grouping them here makes it easier to:
- Find and modify default values
- Understand rendering limits at a glance
- Keep document typography consistent across modules
"""

from __future__ import annotations

# =============================================================================
# Rendering Resilience
# =============================================================================

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1000  # fixed delay between attempts, not exponential

# Cumulative failed attempts before rendering is disabled for the conversion
SAFE_MODE_FAILURE_THRESHOLD = 5

# =============================================================================
# Sandbox (headless Chromium via Playwright)
# =============================================================================

DEFAULT_SANDBOX_LAUNCH_TIMEOUT_MS = 30000
DEFAULT_SANDBOX_WAIT_FOR = "networkidle"
DEFAULT_FORMULA_VIEWPORT_WIDTH = 1200
DEFAULT_FORMULA_VIEWPORT_HEIGHT = 800
DEFAULT_GRAPHIC_VIEWPORT_WIDTH = 800
DEFAULT_GRAPHIC_VIEWPORT_HEIGHT = 600
DEFAULT_SANDBOX_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-first-run",
    "--no-zygote",
    "--disable-extensions",
    "--disable-background-timer-throttling",
    "--disable-renderer-backgrounding",
)

# =============================================================================
# Raster Conversion
# =============================================================================

DEFAULT_RASTER_MAX_WIDTH = 800
DEFAULT_RASTER_MAX_HEIGHT = 600

# =============================================================================
# Assets
# =============================================================================

ASSET_DIR_NAME = "temp_images"
FORMULA_FILE_PREFIX = "math_"
GRAPHIC_FILE_PREFIX = "svg_"
ASSET_FILE_SUFFIX = ".png"

# =============================================================================
# Image Embedding
# =============================================================================

IMAGE_MAX_WIDTH = 500
IMAGE_MAX_HEIGHT = 350
IMAGE_FALLBACK_WIDTH = 600
IMAGE_FALLBACK_HEIGHT = 400

# =============================================================================
# Page Setup and Typography
# =============================================================================

DEFAULT_PAGE_SIZE = "A4"
DEFAULT_MARGIN_TWIPS = 720  # 0.5 inch
DEFAULT_FONT = "Times New Roman"
DEFAULT_FONT_SIZE = 24  # half-points (12pt)
CODE_FONT = "Courier New"

# Heading sizes in half-points: level 1, level 2, level 3 and deeper
HEADING_SIZE_TIERS = (32, 28, 24)

PARAGRAPH_FIRST_LINE_INDENT_TWIPS = 240
LIST_INDENT_TWIPS = 360
BLOCKQUOTE_INDENT_TWIPS = 720

TABLE_WIDTH_PERCENT = 90
TABLE_HEADER_FILL = "E6E6E6"
TABLE_HEADER_FONT_SIZE = 22
TABLE_BODY_FONT_SIZE = 20
CODE_BLOCK_FILL = "F8F8F8"
CODE_BLOCK_FONT_SIZE = 20
CODE_BLOCK_BORDER_COLOR = "CCCCCC"
INLINE_CODE_FILL = "F5F5F5"
BLOCKQUOTE_BORDER_COLOR = "4A90E2"

BULLET_GLYPH = "•"

# =============================================================================
# Table of Contents
# =============================================================================

TOC_TITLE = "Contents"
TOC_HEADING_RANGE = "1-3"

# =============================================================================
# Fallback Text
# =============================================================================

GRAPHIC_PLACEHOLDER_CAPTION = "\n**[SVG chart]**\n"

# =============================================================================
# Paths and Filenames
# =============================================================================

CONFIG_FILENAME = "md2word.json"
DEFAULT_LOG_DIR = "~/.md2word/logs"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_ROTATION = "10 MB"
DEFAULT_LOG_RETENTION = "7 days"
