"""Custom exceptions for filter presets."""

from filter_engine.exceptions import FilterEngineError


class FilterPresetError(FilterEngineError):
    """Base exception for filter preset errors."""

    pass


class PresetNotFoundError(FilterPresetError):
    """Raised when a preset is not found for the user."""

    pass


class PresetNameExistsError(FilterPresetError):
    """Raised when a preset with the same name already exists on the page."""

    pass


class InvalidPresetError(FilterPresetError):
    """Raised when preset data is missing required values or holds an invalid filter tree."""

    pass
