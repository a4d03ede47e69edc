"""Inkpress configuration system.

Configuration is YAML-based with minimal CLI overrides (--verbose, --quiet, --ci).
Supports environment variable substitution (${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.inkpress/config.yaml
3. ./inkpress.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class ServerConfig:
    """Filesystem roots for templates, pages and static assets.

    Each value is the parent directory of the matching tree, so with the
    defaults the trees live at ./templates, ./pages and ./static.

    Attributes:
        templates_parent_dir: Parent of the templates/ directory
        pages_parent_dir: Parent of the pages/ directory
        static_parent_dir: Parent of the static/ directory
    """

    templates_parent_dir: str = ""
    pages_parent_dir: str = ""
    static_parent_dir: str = ""

    @property
    def templates_path(self) -> Path:
        return Path(self.templates_parent_dir or ".") / "templates"

    @property
    def pages_path(self) -> Path:
        return Path(self.pages_parent_dir or ".") / "pages"

    @property
    def static_path(self) -> Path:
        return Path(self.static_parent_dir or ".") / "static"


@dataclass
class L10nConfig:
    """Localization configuration.

    Attributes:
        locales_dir: Directory of <lang>.yaml string tables (None = bundled tables)
        default_language: Language code used when a request has none
    """

    locales_dir: str | None = None
    default_language: str = "en"

    def __post_init__(self) -> None:
        """Validate localization configuration."""
        if not re.fullmatch(r"[A-Za-z]{2,3}([-_][A-Za-z0-9]+)*", self.default_language):
            raise ValueError(f"Invalid default language code: {self.default_language!r}")


@dataclass
class InkpressConfig:
    """Top-level Inkpress configuration.

    Attributes:
        server: Template, page and static asset roots
        l10n: Localization settings
        debug: Log every template file as it is compiled
    """

    server: ServerConfig = field(default_factory=ServerConfig)
    l10n: L10nConfig = field(default_factory=L10nConfig)
    debug: bool = False

    # Runtime overrides (set by CLI)
    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${INKPRESS_TEMPLATES} -> value of INKPRESS_TEMPLATES

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted
    """
    if isinstance(value, str):
        # Pattern: ${VAR_NAME}
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.inkpress/config.yaml
    2. ./inkpress.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".inkpress" / "config.yaml",
        start_path / "inkpress.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> InkpressConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        InkpressConfig instance
    """
    data = substitute_env_vars(data)

    config = InkpressConfig()

    if "server" in data:
        server_data = data["server"] or {}
        config.server = ServerConfig(
            templates_parent_dir=server_data.get("templates_parent_dir", ""),
            pages_parent_dir=server_data.get("pages_parent_dir", ""),
            static_parent_dir=server_data.get("static_parent_dir", ""),
        )

    if "l10n" in data:
        l10n_data = data["l10n"] or {}
        config.l10n = L10nConfig(
            locales_dir=l10n_data.get("locales_dir"),
            default_language=l10n_data.get("default_language", "en"),
        )

    config.debug = bool(data.get("debug", False))

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> InkpressConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        InkpressConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = InkpressConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# Inkpress Configuration

# Filesystem roots. Each tree (templates/, pages/, static/) is created
# inside its parent directory by `inkpress unpack` on first run.
server:
  templates_parent_dir: ""
  pages_parent_dir: ""
  static_parent_dir: ""

# Localization string tables
l10n:
  # locales_dir: "./locales"   # <lang>.yaml files; bundled tables when unset
  default_language: "en"

# Log every template file as it is compiled
debug: false
'''
