"""Settings for the log server: a YAML file plus ``APP_*`` environment overrides."""

import logging
from pathlib import Path

import yaml
from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, EnvSettingsSource, SettingsConfigDict

from logwire.levels import Severity

log = logging.getLogger("logwire")

_ENV_PREFIX = "APP_"
_SUFFIXES = (".yaml", ".yml")


class ConfigurationError(RuntimeError):
    """Settings could not be loaded; the process must not continue."""


class Settings(BaseSettings):
    address: str
    port: int = Field(ge=0, le=65535)
    level: Severity
    num_messages: int = Field(gt=0)

    model_config = SettingsConfigDict(
        env_prefix=_ENV_PREFIX,
        env_parse_enums=False,  # APP_LEVEL goes through the same label rules as the file
        frozen=True,
        extra="ignore",
    )

    @model_validator(mode="before")
    @classmethod
    def _accept_capacity(cls, data):
        # "capacity" is another name for num_messages. Not an alias: an alias
        # would replace the APP_NUM_MESSAGES environment variable name.
        if isinstance(data, dict) and "capacity" in data:
            data = dict(data)
            capacity = data.pop("capacity")
            data.setdefault("num_messages", capacity)
        return data

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value):
        return Severity.parse(value)

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        # Direct construction is a plain value; load_settings() merges file and env itself.
        return (init_settings,)

    @property
    def capacity(self) -> int:
        """Maximum number of buffered log items."""
        return self.num_messages


def _resolve(directory: str | Path, filename: str) -> Path:
    path = Path(directory) / filename
    if path.is_file():
        return path
    for suffix in _SUFFIXES:
        candidate = path.with_name(path.name + suffix)
        if candidate.is_file():
            return candidate
    raise ConfigurationError(f"Could not find settings file {path}")


def _read(path: Path) -> dict:
    """Read the YAML settings file and return its contents as a dict."""
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Could not read settings file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a mapping")
    return data


def load_settings(directory: str | Path, filename: str) -> Settings:
    """Load settings from *directory*/*filename*, letting ``APP_*`` variables override keys.

    *filename* may omit its ``.yaml``/``.yml`` suffix. Any missing or
    unparseable key raises :class:`ConfigurationError`.
    """
    try:
        path = _resolve(directory, filename)
        values = _read(path)
        values.update(EnvSettingsSource(Settings)())
        settings = Settings(**values)
    except ConfigurationError as exc:
        log.error("%s", exc)
        raise
    except ValidationError as exc:
        log.error("Invalid settings in %s/%s: %s", directory, filename, exc)
        raise ConfigurationError(f"Invalid settings: {exc}") from exc

    log.debug(
        "Loaded settings from %s (address=%s, port=%d, level=%s, capacity=%d)",
        path, settings.address, settings.port, settings.level.value, settings.capacity,
    )
    return settings
