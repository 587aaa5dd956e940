"""
Tests for runtime drawing defaults and parameter validation.
"""
import pytest

from zimage_bot.draw.settings import DrawSettings, validate_size, validate_steps
from zimage_bot.draw.types import DrawError, DrawErrorType


def test_defaults():
    settings = DrawSettings()
    assert (settings.model, settings.size, settings.steps) == ("z-image-turbo", "1024x1024", 8)


def test_invalid_configured_defaults_are_replaced():
    settings = DrawSettings(model="sdxl", size="10x10", steps=500)
    assert (settings.model, settings.size, settings.steps) == ("z-image-turbo", "1024x1024", 8)


def test_from_config(draw_config):
    draw_config.update(ZIMAGE_DEFAULT_MODEL="z-image", ZIMAGE_DEFAULT_STEPS=25)
    settings = DrawSettings.from_config(draw_config)
    assert settings.model == "z-image"
    assert settings.steps == 25


@pytest.mark.parametrize("steps", [1, 8, 50, "12"])
def test_validate_steps_accepts_range(steps):
    assert validate_steps(steps) == int(steps)


@pytest.mark.parametrize("steps", [0, 51, -3, "abc", None, True])
def test_validate_steps_rejects(steps):
    with pytest.raises(DrawError) as exc:
        validate_steps(steps)
    assert exc.value.error_type == DrawErrorType.INVALID_PARAMETER


def test_validate_size():
    assert validate_size("1440x720") == "1440x720"
    with pytest.raises(DrawError) as exc:
        validate_size("1440X720")
    assert exc.value.error_type == DrawErrorType.INVALID_PARAMETER


def test_setters_validate_and_keep_previous_value():
    settings = DrawSettings()
    settings.set_default_model("z-image")
    settings.set_default_size("864x1152")
    settings.set_default_steps(40)
    assert (settings.model, settings.size, settings.steps) == ("z-image", "864x1152", 40)

    for setter, value in (
        (settings.set_default_model, "z-image-2"),
        (settings.set_default_size, "1x1"),
        (settings.set_default_steps, 0),
    ):
        with pytest.raises(DrawError):
            setter(value)
    assert (settings.model, settings.size, settings.steps) == ("z-image", "864x1152", 40)
