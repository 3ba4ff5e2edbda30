"""
Configuration management for Contour Fit.

Loads YAML configuration with sensible defaults for the fitter and tracing.
"""

import os
from dataclasses import asdict, dataclass, field, fields

import yaml

from contourfit.splitmerge.split_selector import SPLIT_SELECTORS


@dataclass
class SplitMergeConfig:
    """Configuration for the polyline split-merge fitter."""
    # reject splits that turn towards positive z. Convex contours must wind
    # counter-clockwise in image coordinates (y down), otherwise the fit
    # never grows past the initial triangle
    convex: bool = False
    max_sides: int = 20
    min_sides: int = 3
    minimum_side_length: int = 10  # contour points
    extra_consider: int = 4  # sides grown past max_sides before shrinking
    corner_score_penalty: float = 0.25  # multiplied by contour length
    threshold_side_split_score: float = 1.0  # per contour point
    max_number_of_side_samples: int = 50
    split_selector: str = "maximum_line_distance"


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class FitConfig:
    """Complete configuration."""
    split_merge: SplitMergeConfig = field(default_factory=SplitMergeConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)


def validate_config(config):
    """
    Check a SplitMergeConfig for values the fitter cannot work with.

    Raises ValueError describing every problem found.
    """
    errors = []

    if config.min_sides < 3:
        errors.append(f"min_sides must be at least 3, got {config.min_sides}")
    if config.max_sides < config.min_sides:
        errors.append(f"max_sides ({config.max_sides}) must not be less than min_sides ({config.min_sides})")
    if config.minimum_side_length < 1:
        errors.append(f"minimum_side_length must be positive, got {config.minimum_side_length}")
    if config.extra_consider < 0:
        errors.append(f"extra_consider must not be negative, got {config.extra_consider}")
    if config.max_number_of_side_samples < 1:
        errors.append(f"max_number_of_side_samples must be positive, got {config.max_number_of_side_samples}")
    if config.split_selector not in SPLIT_SELECTORS:
        errors.append(f"unknown split_selector '{config.split_selector}'")

    if errors:
        raise ValueError("Invalid split-merge configuration: " + "; ".join(errors))


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = FitConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    validate_config(config.split_merge)
    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass, ignoring unknown keys."""
    for section in fields(config):
        values = yaml_data.get(section.name)
        if not isinstance(values, dict):
            continue

        target = getattr(config, section.name)
        for key, value in values.items():
            if hasattr(target, key):
                setattr(target, key, value)

    return config


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    yaml_data = asdict(FitConfig())

    # file_path has no useful default
    yaml_data["tracing"].pop("file_path")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
