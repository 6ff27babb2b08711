"""
Configuration management for the face batch detection tool.

Provides a layered configuration system with the following precedence
(highest to lowest):

    CLI arguments > Environment variables > YAML config file > Defaults

Design constraints:
    - The system MUST run with zero configuration (safe defaults only).
    - Missing or invalid values fail early and loudly.
    - No detection logic, I/O, or model loading belongs here.

Non-goals:
    - No dynamic reloading.
    - No per-image configuration; one frozen config governs the whole run.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Project root resolution
# ---------------------------------------------------------------------------
# Resolved relative to this file's location: facesweep/config.py → repo root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_project_root() -> Path:
    """Return the resolved project root directory."""
    return _PROJECT_ROOT


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ModelConfig:
    """Face detector model configuration.

    Attributes:
        cascade_path: Haar cascade XML file. Absolute paths are used as-is,
                      relative paths are tried against the project root and
                      then against OpenCV's bundled cascade directory.
    """

    cascade_path: str = "haarcascade_frontalface_default.xml"


@dataclass(frozen=True)
class FilterConfig:
    """Preprocessing filter parameters.

    Attributes:
        gaussian_kernel: Side of the square Gaussian kernel (odd, positive).
        bilateral_diameter: Pixel neighbourhood diameter of the bilateral filter.
        bilateral_sigma_color: Bilateral filter sigma in intensity space.
        bilateral_sigma_space: Bilateral filter sigma in coordinate space.
    """

    gaussian_kernel: int = 5
    bilateral_diameter: int = 9
    bilateral_sigma_color: float = 75.0
    bilateral_sigma_space: float = 75.0


@dataclass(frozen=True)
class DetectionConfig:
    """Detection sensitivity and suppression parameters.

    Attributes:
        scale_factor: Growth between successive search scales (1.1 = 10%).
        min_neighbors: Overlapping windows required to report a candidate.
        min_window_floor: Smallest minimum window size, in pixels.
        min_window_divisor: Minimum window is min(width, height) divided by this.
        overlap_threshold: Candidates overlapping a retained rectangle by more
                           than this fraction of the smaller area are dropped.
    """

    scale_factor: float = 1.1
    min_neighbors: int = 10
    min_window_floor: int = 60
    min_window_divisor: int = 10
    overlap_threshold: float = 0.3


@dataclass(frozen=True)
class InputConfig:
    """Input source configuration.

    Attributes:
        directory: Root directory scanned recursively for images.
        max_height: Optional height to downscale taller images to before
                    detection. None means no resizing.
    """

    directory: Optional[str] = None
    max_height: Optional[int] = None


@dataclass(frozen=True)
class OutputConfig:
    """Output behavior configuration.

    Attributes:
        save_dir: Directory for annotated copies. When None, annotated
                  images are displayed instead of saved.
        report_path: Optional .json or .csv file receiving every image's
                     final rectangles.
    """

    save_dir: Optional[str] = None
    report_path: Optional[str] = None


@dataclass(frozen=True)
class VisualizationConfig:
    """Visualization rendering parameters.

    Attributes:
        box_color: BGR color tuple for face rectangles.
        thickness: Line thickness in pixels.
        window_name: Title of the display window.
    """

    box_color: Tuple[int, int, int] = (255, 0, 0)
    thickness: int = 2
    window_name: str = "Detected Faces"


@dataclass(frozen=True)
class AppConfig:
    """Top-level application configuration.

    Aggregates all sub-configurations into a single, frozen object.
    """

    model: ModelConfig = field(default_factory=ModelConfig)
    filters: FilterConfig = field(default_factory=FilterConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    visualization: VisualizationConfig = field(default_factory=VisualizationConfig)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

_VALID_REPORT_SUFFIXES = {".json", ".csv"}


def _validate(config: AppConfig) -> None:
    """Validate configuration values. Raises ValueError on invalid state."""

    kernel = config.filters.gaussian_kernel
    if kernel <= 0 or kernel % 2 == 0:
        raise ValueError(
            f"filters.gaussian_kernel must be a positive odd integer, "
            f"got {kernel}."
        )

    if config.filters.bilateral_diameter <= 0:
        raise ValueError(
            f"filters.bilateral_diameter must be positive, "
            f"got {config.filters.bilateral_diameter}."
        )

    if config.filters.bilateral_sigma_color <= 0 or config.filters.bilateral_sigma_space <= 0:
        raise ValueError(
            f"filters.bilateral_sigma_color and filters.bilateral_sigma_space "
            f"must be positive, got {config.filters.bilateral_sigma_color} and "
            f"{config.filters.bilateral_sigma_space}."
        )

    if config.detection.scale_factor <= 1.0:
        raise ValueError(
            f"detection.scale_factor must be greater than 1.0, "
            f"got {config.detection.scale_factor}."
        )

    if config.detection.min_neighbors < 0:
        raise ValueError(
            f"detection.min_neighbors must be non-negative, "
            f"got {config.detection.min_neighbors}."
        )

    if config.detection.min_window_floor <= 0:
        raise ValueError(
            f"detection.min_window_floor must be positive, "
            f"got {config.detection.min_window_floor}."
        )

    if config.detection.min_window_divisor <= 0:
        raise ValueError(
            f"detection.min_window_divisor must be positive, "
            f"got {config.detection.min_window_divisor}."
        )

    if not (0.0 <= config.detection.overlap_threshold <= 1.0):
        raise ValueError(
            f"detection.overlap_threshold must be in [0.0, 1.0], "
            f"got {config.detection.overlap_threshold}."
        )

    if config.input.max_height is not None and config.input.max_height <= 0:
        raise ValueError(
            f"input.max_height must be positive or None, "
            f"got {config.input.max_height}."
        )

    if config.output.report_path is not None:
        suffix = Path(config.output.report_path).suffix.lower()
        if suffix not in _VALID_REPORT_SUFFIXES:
            raise ValueError(
                f"output.report_path must end in one of {_VALID_REPORT_SUFFIXES}, "
                f"got '{config.output.report_path}'."
            )

    if config.visualization.thickness <= 0:
        raise ValueError(
            f"visualization.thickness must be positive, "
            f"got {config.visualization.thickness}."
        )


# ---------------------------------------------------------------------------
# YAML loading
# ---------------------------------------------------------------------------

def _parse_tuple(value, expected_len: int, cast_type=float):
    """Convert a list from YAML into a tuple of the expected type and length."""
    if isinstance(value, (list, tuple)):
        if len(value) != expected_len:
            raise ValueError(
                f"Expected {expected_len} values, got {len(value)}: {value}"
            )
        return tuple(cast_type(v) for v in value)
    return value


def _optional(value, cast_type):
    """Cast a YAML/env value, keeping None (and the string 'none') as None."""
    if value is None or (isinstance(value, str) and value.strip().lower() in ("", "none")):
        return None
    return cast_type(value)


def _build_model_config(raw: dict) -> ModelConfig:
    """Build ModelConfig from a raw YAML dict."""
    kwargs = {}
    if "cascade_path" in raw:
        kwargs["cascade_path"] = str(raw["cascade_path"])
    return ModelConfig(**kwargs)


def _build_filter_config(raw: dict) -> FilterConfig:
    """Build FilterConfig from a raw YAML dict."""
    kwargs = {}
    if "gaussian_kernel" in raw:
        kwargs["gaussian_kernel"] = int(raw["gaussian_kernel"])
    if "bilateral_diameter" in raw:
        kwargs["bilateral_diameter"] = int(raw["bilateral_diameter"])
    if "bilateral_sigma_color" in raw:
        kwargs["bilateral_sigma_color"] = float(raw["bilateral_sigma_color"])
    if "bilateral_sigma_space" in raw:
        kwargs["bilateral_sigma_space"] = float(raw["bilateral_sigma_space"])
    return FilterConfig(**kwargs)


def _build_detection_config(raw: dict) -> DetectionConfig:
    """Build DetectionConfig from a raw YAML dict."""
    kwargs = {}
    if "scale_factor" in raw:
        kwargs["scale_factor"] = float(raw["scale_factor"])
    if "min_neighbors" in raw:
        kwargs["min_neighbors"] = int(raw["min_neighbors"])
    if "min_window_floor" in raw:
        kwargs["min_window_floor"] = int(raw["min_window_floor"])
    if "min_window_divisor" in raw:
        kwargs["min_window_divisor"] = int(raw["min_window_divisor"])
    if "overlap_threshold" in raw:
        kwargs["overlap_threshold"] = float(raw["overlap_threshold"])
    return DetectionConfig(**kwargs)


def _build_input_config(raw: dict) -> InputConfig:
    """Build InputConfig from a raw YAML dict."""
    kwargs = {}
    if "directory" in raw:
        kwargs["directory"] = _optional(raw["directory"], str)
    if "max_height" in raw:
        kwargs["max_height"] = _optional(raw["max_height"], int)
    return InputConfig(**kwargs)


def _build_output_config(raw: dict) -> OutputConfig:
    """Build OutputConfig from a raw YAML dict."""
    kwargs = {}
    if "save_dir" in raw:
        kwargs["save_dir"] = _optional(raw["save_dir"], str)
    if "report_path" in raw:
        kwargs["report_path"] = _optional(raw["report_path"], str)
    return OutputConfig(**kwargs)


def _build_visualization_config(raw: dict) -> VisualizationConfig:
    """Build VisualizationConfig from a raw YAML dict."""
    kwargs = {}
    if "box_color" in raw:
        kwargs["box_color"] = _parse_tuple(raw["box_color"], 3, int)
    if "thickness" in raw:
        kwargs["thickness"] = int(raw["thickness"])
    if "window_name" in raw:
        kwargs["window_name"] = str(raw["window_name"])
    return VisualizationConfig(**kwargs)


# ---------------------------------------------------------------------------
# Environment variable overrides
# ---------------------------------------------------------------------------

_ENV_PREFIX = "FACESWEEP_"


def _apply_env_overrides(raw: dict) -> dict:
    """Apply environment variable overrides to the raw config dict.

    Environment variables follow the pattern:
        FACESWEEP_MODEL_CASCADE_PATH=/opt/cascades/frontalface.xml
        FACESWEEP_DETECTION_MIN_NEIGHBORS=6

    Each supported variable maps to one (section, key) pair below.
    """
    env_map = {
        f"{_ENV_PREFIX}MODEL_CASCADE_PATH": ("model", "cascade_path"),
        f"{_ENV_PREFIX}DETECTION_SCALE_FACTOR": ("detection", "scale_factor"),
        f"{_ENV_PREFIX}DETECTION_MIN_NEIGHBORS": ("detection", "min_neighbors"),
        f"{_ENV_PREFIX}DETECTION_MIN_WINDOW_FLOOR": ("detection", "min_window_floor"),
        f"{_ENV_PREFIX}DETECTION_OVERLAP_THRESHOLD": ("detection", "overlap_threshold"),
        f"{_ENV_PREFIX}INPUT_DIRECTORY": ("input", "directory"),
        f"{_ENV_PREFIX}INPUT_MAX_HEIGHT": ("input", "max_height"),
        f"{_ENV_PREFIX}OUTPUT_SAVE_DIR": ("output", "save_dir"),
        f"{_ENV_PREFIX}OUTPUT_REPORT_PATH": ("output", "report_path"),
    }

    for env_var, (section, key) in env_map.items():
        value = os.environ.get(env_var)
        if value is not None:
            raw.setdefault(section, {})[key] = value
            logger.debug("Config override from env: %s=%s", env_var, value)

    return raw


# ---------------------------------------------------------------------------
# Public loader
# ---------------------------------------------------------------------------

def _apply_overrides(raw: dict, overrides: Dict[str, Dict[str, Any]]) -> dict:
    """Merge explicit (section → key → value) overrides, skipping None values."""
    for section, values in overrides.items():
        for key, value in values.items():
            if value is not None:
                raw.setdefault(section, {})[key] = value
    return raw


def load_config(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Dict[str, Any]]] = None,
) -> AppConfig:
    """Load and validate application configuration.

    Precedence (highest → lowest):
        Explicit overrides (CLI) > Environment variables > YAML file > Defaults

    Args:
        config_path: Path to a YAML configuration file. If None,
                     the system runs entirely on defaults.
        overrides: Nested mapping such as {"output": {"save_dir": "out/"}}.
                   None values are ignored so unset CLI flags fall through
                   to the lower layers.

    Returns:
        A validated, frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If any configuration value is invalid.
        yaml.YAMLError: If the YAML file is malformed.
    """
    raw: dict = {}

    # --- Layer 1: YAML file ---
    if config_path is not None:
        resolved = Path(config_path)
        if not resolved.is_file() and not resolved.is_absolute():
            resolved = _PROJECT_ROOT / resolved

        if not resolved.is_file():
            raise FileNotFoundError(
                f"Configuration file not found: {resolved}. "
                f"Provide a valid path or omit to use defaults."
            )

        logger.info("Loading config from: %s", resolved)
        with open(resolved, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        if not isinstance(raw, dict):
            raise ValueError(
                f"Configuration file must contain a mapping at the top level, "
                f"got {type(raw).__name__}."
            )

    # --- Layer 2: Environment variable overrides ---
    raw = _apply_env_overrides(raw)

    # --- Layer 3: Explicit overrides ---
    if overrides:
        raw = _apply_overrides(raw, overrides)

    # --- Build typed configs ---
    config = AppConfig(
        model=_build_model_config(raw.get("model") or {}),
        filters=_build_filter_config(raw.get("filters") or {}),
        detection=_build_detection_config(raw.get("detection") or {}),
        input=_build_input_config(raw.get("input") or {}),
        output=_build_output_config(raw.get("output") or {}),
        visualization=_build_visualization_config(raw.get("visualization") or {}),
    )

    # --- Validate ---
    _validate(config)

    logger.debug("Configuration loaded: %s", config)
    return config
