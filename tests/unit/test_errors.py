"""Tests for the error hierarchy."""

from pathlib import Path

import pytest

from md2word.errors import (
    AssetError,
    ConfigError,
    ConversionError,
    Md2WordError,
    RasterConversionError,
    RenderError,
    RenderFailureKind,
    SandboxLaunchError,
    SandboxTimeoutError,
    TargetNotFoundError,
    TypesetError,
)


class TestRenderErrors:
    """Render errors carry a normalized failure kind."""

    @pytest.mark.parametrize(
        "error,kind",
        [
            (SandboxLaunchError("x"), RenderFailureKind.LAUNCH),
            (SandboxTimeoutError("x"), RenderFailureKind.TIMEOUT),
            (TargetNotFoundError("#formula"), RenderFailureKind.MISSING_TARGET),
            (RasterConversionError("x"), RenderFailureKind.RASTER),
            (TypesetError("x"), RenderFailureKind.TYPESET),
            (RenderError("x"), RenderFailureKind.UNKNOWN),
        ],
    )
    def test_kind(self, error, kind):
        assert isinstance(error, RenderError)
        assert isinstance(error, Md2WordError)
        assert error.kind is kind

    def test_explicit_kind_overrides_default(self):
        error = RenderError("x", kind=RenderFailureKind.TIMEOUT)

        assert error.kind is RenderFailureKind.TIMEOUT
        assert RenderError.kind is RenderFailureKind.UNKNOWN

    def test_target_not_found_message(self):
        error = TargetNotFoundError("#formula")

        assert error.selector == "#formula"
        assert "#formula" in str(error)


class TestOtherErrors:
    """Tests for non-render errors."""

    def test_conversion_error_keeps_cause(self):
        cause = ValueError("inner")

        error = ConversionError("failed", cause=cause)

        assert error.cause is cause
        assert str(error) == "failed"

    def test_asset_error_path(self):
        error = AssetError("img/a.png", "No such file")

        assert error.path == Path("img/a.png")
        assert "img" in str(error)

    def test_config_error_path(self):
        error = ConfigError(Path("md2word.json"), "bad")

        assert error.path == Path("md2word.json")
        assert "bad" in str(error)
