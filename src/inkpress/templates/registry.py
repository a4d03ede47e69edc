"""Template registry: the three namespaces of compiled templates.

The registry is populated once by ``init_templates`` before any request is
served, then only read. Rendering never mutates it, so any number of
concurrent render calls may share one registry.

Usage:
    registry = init_templates(config)
    registry.render_page(response, "login.html", {"lang": "en", ...})
"""

import logging
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any, TextIO

import yaml

from inkpress.config import InkpressConfig
from inkpress.errors import RenderError, StartupError
from inkpress.l10n import StringTables
from inkpress.templates.composer import (
    PAGES_DIR,
    TEMPLATES_DIR,
    USER_DIR,
    CompiledTemplate,
    Namespace,
    build_template,
)
from inkpress.templates.discovery import (
    iter_page_files,
    iter_template_files,
    iter_user_page_files,
    require_dir,
)
from inkpress.templates.functions import build_function_library
from inkpress.utils.logging import get_logger

logger = get_logger(__name__)


class TemplateRegistry:
    """Owns the compiled templates, pages and user pages.

    Keys:
        templates: file name before the first dot ("collection")
        pages: file name ("login.html")
        user_pages: file name, or "<dir>/<file>" for nested files
    """

    def __init__(
        self,
        templates: Mapping[str, CompiledTemplate],
        pages: Mapping[str, CompiledTemplate],
        user_pages: Mapping[str, CompiledTemplate],
        default_language: str = "en",
    ) -> None:
        self.templates: Mapping[str, CompiledTemplate] = MappingProxyType(dict(templates))
        self.pages: Mapping[str, CompiledTemplate] = MappingProxyType(dict(pages))
        self.user_pages: Mapping[str, CompiledTemplate] = MappingProxyType(dict(user_pages))
        self.default_language = default_language

    def namespace(self, namespace: Namespace) -> Mapping[str, CompiledTemplate]:
        return {
            Namespace.TEMPLATES: self.templates,
            Namespace.PAGES: self.pages,
            Namespace.USER_PAGES: self.user_pages,
        }[namespace]

    def render_page(self, out: TextIO, key: str, data: Any) -> None:
        """Render a standalone page through the base document shell.

        Output is streamed to out; if execution fails part of the page may
        already have been written.

        Args:
            out: Writer receiving the rendered HTML
            key: Page key (an unknown key raises KeyError)
            data: Mapping (or object whose attributes are used) for the template

        Raises:
            RenderError: If template execution fails
        """
        self._execute(self.pages[key], out, data)

    def render_user_page(self, out: TextIO, key: str, data: Any) -> None:
        """Render a per-user page from its own root fragment.

        Raises:
            RenderError: If data is None or template execution fails
        """
        if data is None:
            logger.error("render_user_page: data is None for %s", key)
            raise RenderError(key, "data is None")
        self._execute(self.user_pages[key], out, data)

    def render_template(self, out: TextIO, key: str, data: Any) -> None:
        """Render a site template (collection, post, read...) from its own fragment.

        Raises:
            RenderError: If template execution fails
        """
        self._execute(self.templates[key], out, data)

    def _execute(self, unit: CompiledTemplate, out: TextIO, data: Any) -> None:
        try:
            if data is None:
                context: dict[str, Any] = {}
            elif isinstance(data, Mapping):
                context = dict(data)
            else:
                context = dict(AttributeData(data))
            context.setdefault("lang", self.default_language)
            unit.stream(out, context)
        except Exception as e:
            logger.structured(
                logging.ERROR,
                "Error rendering %s: %s",
                unit.key,
                e,
                key=unit.key,
                error=type(e).__name__,
            )
            raise RenderError(unit.key, str(e)) from e


class AttributeData(Mapping[str, Any]):
    """Read-only mapping view of an object's public attributes.

    Works for plain objects, slotted dataclasses, namedtuples and properties
    alike; templates see ``obj.field`` as ``{{ field }}``.
    """

    def __init__(self, obj: Any) -> None:
        self._obj = obj

    def __getitem__(self, name: str) -> Any:
        if name.startswith("_"):
            raise KeyError(name)
        try:
            return getattr(self._obj, name)
        except AttributeError:
            raise KeyError(name) from None

    def __iter__(self) -> Iterator[str]:
        for name in dir(self._obj):
            if not name.startswith("_") and hasattr(self._obj, name):
                yield name

    def __len__(self) -> int:
        return sum(1 for _ in self)


def _load_namespace(
    namespace: Namespace,
    files: Any,
    templates_path: Path,
    functions: Mapping[str, Callable[..., Any]],
    debug: bool,
) -> dict[str, CompiledTemplate]:
    units: dict[str, CompiledTemplate] = {}
    for key, path in files:
        if key in units:
            logger.warning(
                "%s key %r defined by both %s and %s; using %s",
                namespace.value, key, units[key].fragments[0], path, path,
            )
        units[key] = build_template(namespace, key, path, templates_path, functions, debug=debug)
    return units


def init_templates(
    config: InkpressConfig,
    tables: StringTables | None = None,
) -> TemplateRegistry:
    """Load and compile every template file under the configured roots.

    Must complete before any render call. Nothing is registered unless
    every template, page and user page compiles.

    Args:
        config: Inkpress configuration (supplies the parent directories)
        tables: String tables for localstr/localhtml (default: from config)

    Returns:
        Populated TemplateRegistry

    Raises:
        StartupError: If a root directory is missing or unreadable, the
            string tables cannot be loaded, or any template fails to compile
    """
    if tables is None:
        try:
            tables = load_string_tables(config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise StartupError(f"cannot load string tables: {e}", path=config.l10n.locales_dir) from e
    functions = build_function_library(tables)

    templates_path = config.server.templates_path
    require_dir(templates_path, TEMPLATES_DIR)

    logger.info("Loading templates...")
    templates = _load_namespace(
        Namespace.TEMPLATES,
        iter_template_files(templates_path),
        templates_path,
        functions,
        config.debug,
    )

    pages_path = config.server.pages_path
    require_dir(pages_path, PAGES_DIR)

    logger.info("Loading pages...")
    pages = _load_namespace(
        Namespace.PAGES,
        iter_page_files(pages_path),
        templates_path,
        functions,
        config.debug,
    )

    logger.info("Loading user pages...")
    user_path = templates_path / USER_DIR
    require_dir(user_path, f"{TEMPLATES_DIR}/{USER_DIR}")
    user_pages = _load_namespace(
        Namespace.USER_PAGES,
        iter_user_page_files(user_path),
        templates_path,
        functions,
        config.debug,
    )

    logger.info(
        "Loaded %d templates, %d pages, %d user pages",
        len(templates), len(pages), len(user_pages),
    )
    return TemplateRegistry(templates, pages, user_pages, config.l10n.default_language)


def load_string_tables(config: InkpressConfig) -> StringTables:
    """String tables from the configured locales directory, or the bundled ones."""
    if config.l10n.locales_dir:
        return StringTables.from_directory(Path(config.l10n.locales_dir))
    return StringTables.bundled()
