"""``discogen config`` -- read and edit the persisted defaults.

The stored values feed ``generate`` and ``list``: where packages are
written (``gendir``), which directory is queried (``directory_url``), how
many APIs are generated at once (``jobs``), and document caching.
"""

from __future__ import annotations

import typer

from discogen.commands import abort
from discogen.exceptions import DiscogenError
from discogen.output import info, print_result, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(
    effective: bool = typer.Option(
        False, "--effective", "-e",
        help="Apply ./discogen.json and DISCOGEN_* variables before printing.",
    ),
) -> None:
    """Print the stored settings, or the merged ones with ``--effective``.

    Example::

        discogen --json config show --effective
    """
    from discogen.config import get_config_dir, load_global_config, resolve_config

    try:
        settings = resolve_config() if effective else load_global_config()
    except DiscogenError as exc:
        abort(exc)
    info(f"Reading from {get_config_dir()}")
    print_result(settings.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted setting name, e.g. 'cache.ttl_seconds'."),
    value: str = typer.Argument(help="New value; JSON literals such as 8 or false are decoded."),
) -> None:
    """Change one stored setting.

    Nothing is written when the key is unknown or the value is rejected.

    Example::

        discogen config set gendir ./clients
        discogen config set cache.enabled false
    """
    from discogen.config import load_global_config, save_global_config, set_config_value

    try:
        updated = set_config_value(load_global_config(), key, value)
    except DiscogenError as exc:
        abort(exc)
    save_global_config(updated)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation."),
) -> None:
    """Replace the stored settings with the defaults."""
    from discogen.config import reset_global_config

    if not force and not typer.confirm("Restore default settings?"):
        info("Cancelled.")
        raise typer.Exit()

    reset_global_config()
    success("Settings restored to defaults.")
