"""Configuration file support for cuda-doctor."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from cuda_doctor.utils.errors import ConfigurationError


class DetectionConfig(BaseModel):
    """Detection configuration."""

    timeout: float = Field(default=10.0, gt=0, description="Per-command timeout in seconds")
    max_workers: int = Field(default=5, ge=1, description="Categories extracted in parallel")
    frameworks: list[str] = Field(
        default_factory=lambda: ["pytorch", "tensorflow"],
        description="Frameworks to detect",
    )
    platform: str | None = Field(default=None, description="Platform override (linux, windows, macos)")


class OutputConfig(BaseModel):
    """Output configuration."""

    default_format: str = Field(default="terminal", description="Default output format")
    color: bool = Field(default=True, description="Enable color output")
    verbose: bool = Field(default=False, description="Verbose output")


class UpdatesConfig(BaseModel):
    """Update checker configuration."""

    latest: dict[str, str] = Field(
        default_factory=dict,
        description="Latest known version overrides, keyed by fact key",
    )


class DoctorConfig(BaseModel):
    """Main configuration for cuda-doctor."""

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    updates: UpdatesConfig = Field(default_factory=UpdatesConfig)


def get_config_paths() -> list[Path]:
    """Get possible configuration file paths.

    Returns:
        List of paths to check for configuration files
    """
    paths = []

    # Current directory
    paths.append(Path.cwd() / ".cuda-doctor.yaml")
    paths.append(Path.cwd() / ".cuda-doctor.yml")

    # Home directory
    home = Path.home()
    paths.append(home / ".cuda-doctor.yaml")
    paths.append(home / ".config" / "cuda-doctor" / "config.yaml")

    # XDG config directory
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        paths.append(Path(xdg_config) / "cuda-doctor" / "config.yaml")

    return paths


def load_config(config_path: Path | str | None = None) -> DoctorConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file. If None, searches default locations.

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If an explicit file is missing or any file is invalid
    """
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            return _load_config_file(path)
        raise ConfigurationError(f"Config file not found: {config_path}")

    # Search default locations
    for path in get_config_paths():
        if path.exists():
            return _load_config_file(path)

    # Return default config
    return DoctorConfig()


def _load_config_file(path: Path) -> DoctorConfig:
    """Load configuration from a specific file.

    Args:
        path: Path to config file

    Returns:
        Loaded configuration
    """
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {path}: {e}") from e
    if data is None:
        return DoctorConfig()
    try:
        return DoctorConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config file {path}: {e}") from e


def save_config(config: DoctorConfig, config_path: Path | str | None = None) -> Path:
    """Save configuration to file.

    Args:
        config: Configuration to save
        config_path: Path to save to. Defaults to ~/.config/cuda-doctor/config.yaml

    Returns:
        Path where config was saved
    """
    if config_path is None:
        config_path = Path.home() / ".config" / "cuda-doctor" / "config.yaml"
    else:
        config_path = Path(config_path)

    # Create directory if needed
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json", exclude_defaults=True)
    config_path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False))

    return config_path


# Global config instance
_config: DoctorConfig | None = None


def get_config() -> DoctorConfig:
    """Get the global configuration instance.

    Loads from file on first call.

    Returns:
        Global configuration
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: DoctorConfig | None) -> None:
    """Set the global configuration instance.

    Args:
        config: Configuration to set, or None to reload on next access
    """
    global _config
    _config = config
