"""Saved filter presets package."""

from filter_presets.exceptions import (
    FilterPresetError,
    InvalidPresetError,
    PresetNameExistsError,
    PresetNotFoundError,
)
from filter_presets.manager import FilterPresetManager
from filter_presets.models import FilterPreset

__all__ = [
    # Main class
    "FilterPresetManager",
    # Models
    "FilterPreset",
    # Exceptions
    "FilterPresetError",
    "InvalidPresetError",
    "PresetNameExistsError",
    "PresetNotFoundError",
]
