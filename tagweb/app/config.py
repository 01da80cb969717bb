"""Configuration loader for the Tagweb graph explorer."""
from __future__ import annotations

import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from typing_extensions import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

LOGGER = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded."""


class _FrozenModel(BaseModel):
    """Base model enforcing immutability for config sections."""

    model_config = ConfigDict(frozen=True)


class PipelineConfig(_FrozenModel):
    """Pipeline-level configuration."""

    version: str = Field(..., min_length=1)


class GraphConfig(_FrozenModel):
    """Graph preparation parameters."""

    max_curvature: float = Field(0.5, gt=0.0)
    self_loop_curvature: float = Field(0.0, ge=0.0)


class UIThemeConfig(_FrozenModel):
    """Colours handed to the renderer for highlight styling."""

    active: str
    dimmed: str
    neutral: str
    background: str

    @field_validator("active", "dimmed", "neutral", "background")
    @classmethod
    def _validate_color(cls, value: str) -> str:
        """Validate hex colour strings.

        Args:
            value: Raw colour string from YAML.

        Returns:
            str: Lower-cased colour string.

        Raises:
            ValueError: If the value is not a ``#rgb``, ``#rrggbb`` or ``#rrggbbaa`` colour.
        """
        candidate = value.strip()
        if not _HEX_COLOR.match(candidate):
            msg = f"Invalid colour value: {value!r}"
            raise ValueError(msg)
        return candidate.lower()


class UIViewportConfig(_FrozenModel):
    """Canvas dimensions supplied to the renderer."""

    width: int = Field(..., ge=1)
    height: int = Field(..., ge=1)
    height_padding: int = Field(0, ge=0)

    @property
    def canvas_height(self) -> int:
        """Return the height including the configured padding."""

        return self.height + self.height_padding


class UIRenderConfig(_FrozenModel):
    """Static renderer options."""

    node_rel_size: float = Field(3, gt=0)
    dag_mode: Optional[Literal["td", "bu", "lr", "rl", "radialout", "radialin"]] = Field("radialin")
    auto_pause_redraw: bool = False
    link_curvature_field: str = Field("curvature", min_length=1)


class UIConfig(_FrozenModel):
    """UI-specific configuration values."""

    theme: UIThemeConfig
    viewport: UIViewportConfig
    render: UIRenderConfig = Field(default_factory=UIRenderConfig)
    allowed_origins: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_contrast(self) -> "UIConfig":
        if self.theme.active == self.theme.dimmed:
            msg = "ui.theme.active must differ from ui.theme.dimmed"
            raise ValueError(msg)
        return self


class AppConfig(_FrozenModel):
    """Top-level application configuration composed from config.yaml."""

    pipeline: PipelineConfig
    graph: GraphConfig = Field(default_factory=GraphConfig)
    ui: UIConfig

    @staticmethod
    def default_path() -> Path:
        """Return the default location of the configuration file.

        Returns:
            Path: Absolute path to config.yaml at the repository root, unless
            ``TAGWEB_CONFIG_FILE`` points elsewhere.
        """
        override = os.getenv("TAGWEB_CONFIG_FILE")
        if override:
            return Path(override).expanduser()
        return REPO_ROOT / "config.yaml"


def _determine_env_file_path() -> Optional[Path]:
    """Return the path to the environment file if one should be loaded."""

    override = os.getenv("TAGWEB_ENV_FILE")
    if override:
        candidate = Path(override).expanduser()
        if candidate.exists():
            return candidate
        LOGGER.warning("Configured environment file override does not exist: %s", candidate)
        return None
    if DEFAULT_ENV_FILE.exists():
        return DEFAULT_ENV_FILE
    return None


def _strip_inline_comment(value: str) -> str:
    """Remove inline comments from an environment value when unquoted."""

    comment_index = value.find("#")
    if comment_index == -1:
        return value
    return value[:comment_index].rstrip()


def _load_env_file(path: Path) -> None:
    """Populate ``os.environ`` with values read from a ``.env`` file.

    Variables already set to a non-empty value are left untouched.
    """

    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.lower().startswith("export "):
                    line = line[7:].lstrip()
                if "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                key = key.strip()
                if not key:
                    continue
                existing_value = os.environ.get(key)
                if existing_value is not None and existing_value.strip() != "":
                    continue
                value = raw_value.strip()
                if value and value[0] in {'"', "'"} and value[-1] == value[0]:
                    os.environ[key] = value[1:-1]
                    continue
                os.environ[key] = _strip_inline_comment(value)
    except OSError:
        LOGGER.warning("Unable to read environment file at %s", path)


def _override_number(section: Dict[str, Any], key: str, env_var: str, cast: type) -> None:
    raw = os.getenv(env_var)
    if raw is None or not raw.strip():
        return
    try:
        section[key] = cast(raw.strip())
    except ValueError:
        LOGGER.warning("Ignoring non-numeric %s=%r", env_var, raw)
        return
    LOGGER.info("Configuration value %s overridden from %s", key, env_var)


def _apply_environment_overrides(raw_content: Dict[str, Any]) -> Dict[str, Any]:
    """Merge environment-based overrides into the raw configuration mapping.

    Args:
        raw_content: Parsed YAML configuration prior to Pydantic validation.

    Returns:
        Dict[str, Any]: Configuration mapping with environment overrides applied.
    """

    env_file_path = _determine_env_file_path()
    if env_file_path is not None:
        _load_env_file(env_file_path)

    if raw_content.get("graph") is None:
        raw_content["graph"] = {}
    graph_section = raw_content["graph"]
    if isinstance(graph_section, dict):
        _override_number(graph_section, "max_curvature", "TAGWEB_MAX_CURVATURE", float)

    ui_section = raw_content.get("ui")
    if isinstance(ui_section, dict):
        viewport = ui_section.get("viewport")
        if isinstance(viewport, dict):
            _override_number(viewport, "width", "TAGWEB_VIEWPORT_WIDTH", int)
            _override_number(viewport, "height", "TAGWEB_VIEWPORT_HEIGHT", int)
    return raw_content


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read YAML content from disk.

    Args:
        path: Location of the YAML file.

    Returns:
        Dict[str, Any]: Parsed YAML content.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        LOGGER.error("Configuration file missing at %s", path)
        raise ConfigError("Configuration file not found") from exc
    except yaml.YAMLError as exc:
        LOGGER.error("Invalid YAML syntax in %s", path)
        raise ConfigError("Invalid YAML syntax") from exc
    if not isinstance(data, dict):
        LOGGER.error("Configuration root must be a mapping: %s", path)
        raise ConfigError("Configuration root must be a mapping")
    return data


@lru_cache(maxsize=1)
def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load application configuration from YAML.

    Args:
        path: Optional override path to the YAML file.

    Returns:
        AppConfig: Parsed configuration object.

    Raises:
        ConfigError: If the configuration cannot be loaded or validated.
    """
    config_path = path or AppConfig.default_path()
    raw_content = _read_yaml(config_path)
    raw_content = _apply_environment_overrides(raw_content)
    try:
        return AppConfig(**raw_content)
    except ValidationError as exc:
        LOGGER.error("Invalid configuration values: %s", exc)
        raise ConfigError("Configuration validation failed") from exc
