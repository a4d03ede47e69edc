"""Inkpress CLI interface.

Commands:
- init: Write a default configuration file
- unpack: Copy the bundled templates, pages and static files to disk
- check: Compile every template and report what was loaded
- render: Render one page to stdout with data from a YAML/JSON file

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines
- --version: Show version and exit
"""

import sys
from pathlib import Path
from typing import Annotated, Any

import typer
import yaml

from inkpress import __version__
from inkpress.config import InkpressConfig, create_default_config, load_config
from inkpress.errors import AssetUnpackError, RenderError, StartupError
from inkpress.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="inkpress",
    help="Template composition and rendering for Inkpress sites",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: InkpressConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"inkpress {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output with timestamps",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress info messages (warnings and errors only)",
        ),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Enable CI mode with JSON log output",
        ),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Inkpress - compose, compile and render site templates."""
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, yaml.YAMLError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _current_config() -> InkpressConfig:
    return _config if _config is not None else InkpressConfig()


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite existing config",
        ),
    ] = False,
) -> None:
    """Write a default configuration file to ./.inkpress/config.yaml."""
    config_dir = Path(".inkpress")
    config_dir.mkdir(exist_ok=True)
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config())
    _logger.info(f"Created config: {config_file}")
    typer.echo(f"Config written to: {config_file}")


# =============================================================================
# unpack command
# =============================================================================


@app.command()
def unpack() -> None:
    """Copy bundled templates, pages and static files to disk.

    Existing files are never overwritten, so this is safe to run on every start.

    Exit codes:
        0: All trees unpacked (or already present)
        1: One or more trees failed
    """
    from inkpress.unpack import unpack_templates

    try:
        result = unpack_templates(_current_config())
    except AssetUnpackError as e:
        _logger.error("Asset unpacking failed:")
        for error in e.errors:
            _logger.error(f"  {error}")
        raise typer.Exit(1)

    typer.echo(f"Created {len(result.created)} path(s), left {len(result.existing)} existing")


# =============================================================================
# check command
# =============================================================================


@app.command()
def check() -> None:
    """Compile every template, page and user page.

    Exit codes:
        0: Everything compiled
        1: A root directory is missing, a template failed to compile, or
           the string tables could not be loaded
    """
    from inkpress.templates import init_templates

    try:
        registry = init_templates(_current_config())
    except StartupError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    typer.echo(f"templates:  {len(registry.templates)}")
    typer.echo(f"pages:      {len(registry.pages)}")
    typer.echo(f"user pages: {len(registry.user_pages)}")


# =============================================================================
# render command
# =============================================================================


def _load_data(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Data file must contain a mapping: {path}")
    return data


@app.command()
def render(
    key: Annotated[
        str,
        typer.Argument(help="Page key, e.g. login.html (or a user page key with --user)"),
    ],
    data: Annotated[
        Path | None,
        typer.Option(
            "--data",
            "-d",
            help="YAML or JSON file with the template data",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    user: Annotated[
        bool,
        typer.Option(
            "--user",
            help="Render from the user pages namespace",
        ),
    ] = False,
) -> None:
    """Render one page to stdout.

    Exit codes:
        0: Rendered
        1: Unknown key, bad data file, startup or render failure
    """
    from inkpress.templates import init_templates

    try:
        context = _load_data(data)
    except (ValueError, yaml.YAMLError) as e:
        _logger.error(f"Invalid data file: {e}")
        raise typer.Exit(1)

    try:
        registry = init_templates(_current_config())
    except StartupError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    namespace = registry.user_pages if user else registry.pages
    if key not in namespace:
        _logger.error(f"Unknown page: {key}")
        raise typer.Exit(1)

    try:
        if user:
            registry.render_user_page(sys.stdout, key, context)
        else:
            registry.render_page(sys.stdout, key, context)
    except RenderError:
        raise typer.Exit(1)

    sys.stdout.write("\n")


if __name__ == "__main__":
    app()
