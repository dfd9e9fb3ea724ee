"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all configuration for discogen:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.discogen/`` on macOS and Windows. See :func:`get_config_dir`.
* **Global config** -- A single :class:`~discogen.models.GlobalConfig`
  JSON file storing user defaults (discovery service URL, bundle
  directory, request settings).
* **Precedence resolution** -- :func:`resolve_global_config` layers
  ``DISCOGEN_*`` environment variables over the config file, and
  :func:`merge_options` layers per-call :class:`~discogen.models.ClientOptions`
  over factory-level ones.

File writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`).
"""

from __future__ import annotations

import contextlib
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Mapping, Union

from pydantic import ValidationError

from discogen.exceptions import ConfigError
from discogen.models import ClientOptions, GlobalConfig

_APP_NAME = "discogen"
_CONFIG_FILENAME = "config.json"

_ENV_DISCOVERY_URL = "DISCOGEN_DISCOVERY_URL"
_ENV_BUNDLE_DIR = "DISCOGEN_BUNDLE_DIR"
_ENV_TIMEOUT = "DISCOGEN_TIMEOUT"
_ENV_MAX_RETRIES = "DISCOGEN_MAX_RETRIES"

OptionsLike = Union[ClientOptions, Mapping[str, Any], None]


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses the XDG Base Directory layout (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/discogen/`` (default ``~/.config/discogen/``).
    On macOS/Windows: ``~/.discogen/``.
    """
    if _is_xdg_platform():
        env_value = os.environ.get("XDG_CONFIG_HOME", "")
        base = Path(env_value) if env_value else Path.home() / ".config"
        path = base / _APP_NAME
    else:
        path = Path.home() / f".{_APP_NAME}"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* in one rename.

    The temp file lives beside *path* so ``os.replace`` stays on one
    filesystem; readers see either the old file or the new one.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handle, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read ``config.json`` from the config directory.

    A missing file yields the defaults.

    Raises:
        ConfigError: If the file is not valid JSON or holds invalid values.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        return GlobalConfig.model_validate_json(path.read_bytes())
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Write *config* to ``config.json`` atomically."""
    _atomic_write(_global_config_path(), config.model_dump_json(indent=2) + "\n")



def resolve_global_config() -> GlobalConfig:
    """Resolve the effective global config.

    Precedence (high to low):
        1. Environment variables (``DISCOGEN_DISCOVERY_URL``,
           ``DISCOGEN_BUNDLE_DIR``, ``DISCOGEN_TIMEOUT``,
           ``DISCOGEN_MAX_RETRIES``)
        2. User config (``~/.config/discogen/config.json``)
        3. Defaults

    Raises:
        ConfigError: If the file is invalid or an environment variable
            holds a value of the wrong type.
    """
    config = load_global_config()

    updates: dict[str, Any] = {}
    env_url = os.environ.get(_ENV_DISCOVERY_URL)
    if env_url:
        updates["discovery_url"] = env_url
    env_bundle = os.environ.get(_ENV_BUNDLE_DIR)
    if env_bundle:
        updates["bundle_dir"] = env_bundle
    env_timeout = os.environ.get(_ENV_TIMEOUT)
    if env_timeout:
        updates["timeout"] = env_timeout
    env_retries = os.environ.get(_ENV_MAX_RETRIES)
    if env_retries:
        updates["max_retries"] = env_retries

    if not updates:
        return config
    try:
        return GlobalConfig.model_validate({**config.model_dump(), **updates})
    except ValidationError as exc:
        raise ConfigError(f"Invalid DISCOGEN_* environment setting: {exc}") from exc


# --- Client options ---


def coerce_options(options: OptionsLike = None, **overrides: Any) -> ClientOptions:
    """Build :class:`~discogen.models.ClientOptions` from a model, a dict, or keywords.

    Keyword *overrides* win over keys of *options*.

    Raises:
        ConfigError: If the values fail validation.
    """
    if isinstance(options, ClientOptions) and not overrides:
        return options
    if isinstance(options, ClientOptions):
        data: dict[str, Any] = options.model_dump(exclude_unset=True)
    else:
        data = dict(options or {})
    data.update(overrides)
    try:
        return ClientOptions.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid client options: {exc}") from exc


def merge_options(base: ClientOptions, override: ClientOptions) -> ClientOptions:
    """Layer *override* on top of *base*.

    Only fields explicitly set on *override* replace those of *base*.
    ``params`` and ``headers`` are merged key by key, *override* winning.
    """
    data = base.model_dump()
    for field_name in override.model_fields_set:
        value = getattr(override, field_name)
        if field_name in ("params", "headers"):
            data[field_name] = {**data[field_name], **value}
        else:
            data[field_name] = value
    return ClientOptions.model_validate(data)


def options_from_config(config: GlobalConfig) -> ClientOptions:
    """Derive factory-level client options from the global config."""
    return ClientOptions(
        timeout=config.timeout,
        max_retries=config.max_retries,
        verify_ssl=config.verify_ssl,
    )
