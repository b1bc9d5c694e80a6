"""Write a generated client package to disk.

Layout for an API named ``tasks`` at version ``v1``::

    <gendir>/tasks/v1/__init__.py       re-exports the generated module
    <gendir>/tasks/v1/tasks_gen.py      the generated client
    <gendir>/tasks/v1/tasks-api.json    the document it was generated from

Files are only rewritten when their contents change, so regenerating an
unchanged API leaves modification times alone.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from discogen.config import atomic_write
from discogen.exceptions import GenerateError
from discogen.generator.api import API

logger = logging.getLogger(__name__)


def package_dir(api: API, gendir: str | Path) -> Path:
    """Return ``<gendir>/<package>/<version>`` for *api*."""
    return Path(gendir) / api.package / api.version


def module_filename(api: API) -> str:
    return f"{api.package}_gen.py"


def write_file(path: Path, data: str) -> bool:
    """Write *data* to *path* unless the file already holds exactly that.

    Returns:
        ``True`` if the file was written.

    Raises:
        GenerateError: If the file cannot be written.
    """
    try:
        if path.is_file() and path.read_text(encoding="utf-8") == data:
            logger.debug("Unchanged %s", path)
            return False
        atomic_write(path, data)
    except OSError as exc:
        raise GenerateError(f"Failed to write {path}: {exc}") from exc
    logger.debug("Wrote %s", path)
    return True


def write_package(api: API, source: str, raw: dict[str, Any], gendir: str | Path) -> Path:
    """Write the generated module, its ``__init__.py`` and the raw document.

    Returns:
        The package directory.
    """
    out = package_dir(api, gendir)
    module = module_filename(api)
    write_file(out / module, source)
    write_file(out / "__init__.py", _init_source(api))
    write_file(
        out / f"{api.package}-api.json",
        json.dumps(raw, indent=2, ensure_ascii=False) + "\n",
    )
    return out


def _init_source(api: API) -> str:
    stem = module_filename(api)[: -len(".py")]
    return (
        f'"""{api.title} client ({api.id})."""\n'
        "\n"
        f"from .{stem} import *  # noqa: F401,F403\n"
    )
