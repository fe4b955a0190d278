"""Config commands -- view and modify the settings file.

Provides the ``storyblok-cdn config`` sub-command group for reading,
updating, and resetting the user's settings file
(:class:`~storyblok_cdn.models.Settings`). Settings are persisted in the
storyblok-cdn config directory and supply the token source, cache
invalidation mode and connection defaults.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from storyblok_cdn.exceptions import ConfigError
from storyblok_cdn.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the current settings.

    A literal token is masked; ``env:`` and ``file:`` sources are shown as is.

    Example::

        storyblok-cdn config show
        storyblok-cdn --json config show
    """
    from storyblok_cdn.config import get_config_dir, load_settings

    try:
        settings = load_settings()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    data = settings.model_dump(mode="json")
    data["token_source"] = _mask_token(data.get("token_source"))
    info(f"Config directory: {get_config_dir()}")
    format_response(data)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Settings key (dot notation, e.g., 'output.format')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a settings value.

    Uses dot notation for nested keys. The value is coerced to match the
    existing field's type (bool, int, float, or str). The updated settings
    are validated against :class:`~storyblok_cdn.models.Settings` before
    saving.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or validation fails.

    Example::

        storyblok-cdn config set token_source env:STORYBLOK_TOKEN
        storyblok-cdn config set auto_cache_invalidation true
        storyblok-cdn config set timeout 10
    """
    from storyblok_cdn.config import load_settings, save_settings
    from storyblok_cdn.models import Settings

    try:
        settings = load_settings()
    except ConfigError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    data = settings.model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    coerced: Any
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    elif isinstance(current, float):
        try:
            coerced = float(value)
        except ValueError:
            error(f"Expected number for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    else:
        coerced = value

    target[final_key] = coerced

    try:
        new_settings = Settings.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_settings(new_settings)
    shown = _mask_token(coerced) if final_key == "token_source" else coerced
    success(f"Set {key} = {shown}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the settings to defaults.

    Asks for confirmation unless ``--force`` is given.

    Example::

        storyblok-cdn config reset --force
    """
    from storyblok_cdn.config import save_settings
    from storyblok_cdn.models import Settings

    if not force:
        confirmed = typer.confirm("Reset all settings to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    save_settings(Settings())
    success("Settings reset to defaults.")


def _mask_token(source: Any) -> Any:
    """Hide a literal token, keeping only its last four characters."""
    if not isinstance(source, str) or source.startswith(("env:", "file:")):
        return source
    return "****" + source[-4:] if len(source) > 4 else "****"
