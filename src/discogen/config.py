"""Where discogen keeps its files and how settings are layered.

Settings come from four places, highest precedence first: command-line
flags, ``DISCOGEN_*`` environment variables, ``./discogen.json`` in the
working directory, and ``config.json`` in :func:`get_config_dir`.  Missing
keys fall back to the :class:`~discogen.models.GlobalConfig` defaults.
:func:`resolve_config` performs the merge.

:func:`atomic_write` is shared with the generator, so a crashed run never
leaves a truncated config file or client module behind.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from discogen.exceptions import ConfigError
from discogen.models import GlobalConfig

_APP_NAME = "discogen"
_CONFIG_FILENAME = "config.json"
_PROJECT_CONFIG_FILENAME = "discogen.json"

ENV_GENDIR = "DISCOGEN_GENDIR"
ENV_DIRECTORY_URL = "DISCOGEN_DIRECTORY_URL"
ENV_NO_CACHE = "DISCOGEN_NO_CACHE"


# --- Directory layout ---

# kind -> (XDG variable, default under $HOME, subdirectory on other platforms)
_DIR_KINDS: dict[str, tuple[str, tuple[str, ...], tuple[str, ...]]] = {
    "config": ("XDG_CONFIG_HOME", (".config",), ()),
    "cache": ("XDG_CACHE_HOME", (".cache",), ("cache",)),
    "data": ("XDG_DATA_HOME", (".local", "share"), ("data",)),
}


def _is_xdg_platform() -> bool:
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _app_dir(kind: str) -> Path:
    env_var, xdg_default, fallback = _DIR_KINDS[kind]
    if _is_xdg_platform():
        base = os.environ.get(env_var) or str(Path.home().joinpath(*xdg_default))
        path = Path(base) / _APP_NAME
    else:
        path = Path.home().joinpath(f".{_APP_NAME}", *fallback)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Directory of ``config.json``.

    ``$XDG_CONFIG_HOME/discogen`` on Linux and BSD, ``~/.discogen`` elsewhere.
    """
    return _app_dir("config")


def get_cache_dir() -> Path:
    """Directory of the fetched-document cache; safe to delete at any time.

    ``$XDG_CACHE_HOME/discogen`` on Linux and BSD, ``~/.discogen/cache``
    elsewhere.
    """
    return _app_dir("cache")


def get_data_dir() -> Path:
    """Directory whose ``logs`` subdirectory receives crash logs.

    ``$XDG_DATA_HOME/discogen`` on Linux and BSD, ``~/.discogen/data``
    elsewhere.
    """
    return _app_dir("data")


# --- Atomic file writes ---


def atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers never see a partial file.

    The text goes to a sibling temp file, is fsynced, and is then moved over
    *path* with :func:`os.replace`.  Parent directories are created.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


# --- Global config ---


def _read_json_object(path: Path, label: str) -> Optional[dict[str, Any]]:
    """Return the JSON object stored at *path*, or ``None`` when absent."""
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigError(f"Invalid {label} config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} config at {path}: expected a JSON object")
    return data


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Read ``config.json``; defaults apply for a missing file or key.

    Raises:
        ConfigError: If the file is not a JSON object or fails validation.
    """
    path = _global_config_path()
    data = _read_json_object(path, "global") or {}
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    atomic_write(
        _global_config_path(), json.dumps(config.model_dump(mode="json"), indent=2) + "\n"
    )


def reset_global_config() -> GlobalConfig:
    """Overwrite ``config.json`` with the defaults and return them."""
    config = GlobalConfig()
    save_global_config(config)
    return config


def set_config_value(config: GlobalConfig, key: str, value: str) -> GlobalConfig:
    """Return a copy of *config* with the dotted *key* set to *value*.

    *value* is parsed as JSON when possible (``true``, ``4``, ``"x"``) and
    used as a plain string otherwise.

    Example::

        cfg = set_config_value(cfg, "cache.ttl_seconds", "3600")

    Raises:
        ConfigError: If the key does not exist or the value fails validation.
    """
    data = config.model_dump(mode="json")
    parts = key.split(".")
    target: Any = data
    for part in parts[:-1]:
        if not isinstance(target, dict) or part not in target:
            raise ConfigError(f"Unknown config key: {key}")
        target = target[part]
    if not isinstance(target, dict) or parts[-1] not in target:
        raise ConfigError(f"Unknown config key: {key}")
    try:
        parsed: Any = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    target[parts[-1]] = parsed
    try:
        return GlobalConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid value for {key}: {exc}") from exc


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Read ``./discogen.json``, the per-checkout overrides.

    A repository usually pins ``gendir`` here so every regeneration lands in
    the same place.  Returns ``None`` when the file does not exist.

    Raises:
        ConfigError: If the file is not a JSON object.
    """
    return _read_json_object(Path.cwd() / _PROJECT_CONFIG_FILENAME, "project")


# --- Precedence resolution ---


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def resolve_config(
    cli_gendir: Optional[str] = None,
    cli_directory_url: Optional[str] = None,
    cli_cache: Optional[bool] = None,
    cli_jobs: Optional[int] = None,
    cli_check: Optional[bool] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Resolve config with full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_gendir``, ``cli_directory_url``, ...)
        2. Environment variables (``DISCOGEN_GENDIR``,
           ``DISCOGEN_DIRECTORY_URL``, ``DISCOGEN_NO_CACHE``)
        3. Project config (``./discogen.json``)
        4. User config (``~/.config/discogen/config.json``)
        5. Defaults

    Returns:
        The effective :class:`~discogen.models.GlobalConfig`.

    Raises:
        ConfigError: If a config file is invalid.
    """
    # 5 + 4. Load base global config (fills in defaults automatically)
    global_cfg = load_global_config()

    # 3. Layer in project-local config
    project = load_project_config()
    if project:
        merged = global_cfg.model_dump(mode="json")
        for key, value in project.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key].update(value)
            else:
                merged[key] = value
        try:
            global_cfg = GlobalConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    # 2. Environment variables
    env_gendir = os.environ.get(ENV_GENDIR)
    if env_gendir:
        global_cfg.gendir = env_gendir
    env_directory = os.environ.get(ENV_DIRECTORY_URL)
    if env_directory:
        global_cfg.directory_url = env_directory
    if _env_flag(ENV_NO_CACHE):
        global_cfg.cache.enabled = False

    # 1. CLI flags (highest precedence)
    if cli_gendir is not None:
        global_cfg.gendir = cli_gendir
    if cli_directory_url is not None:
        global_cfg.directory_url = cli_directory_url
    if cli_cache is not None:
        global_cfg.cache.enabled = cli_cache
    if cli_jobs is not None:
        global_cfg.jobs = cli_jobs
    if cli_check is not None:
        global_cfg.check = cli_check
    if cli_format is not None:
        global_cfg.output.format = cli_format

    return global_cfg
