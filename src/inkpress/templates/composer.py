"""Template set builder.

A page is rendered from one compiled unit made of several fragment files:
the page's own source, a fixed spine of shared fragments, and optional
fragment groups chosen by the page identifier. This module decides that
ordered fragment list and compiles it into a ``CompiledTemplate``.

Fragments address each other by logical name, which is the file stem:
``templates/include/footer.html`` is ``{% include "footer" %}``. When two
fragments in one unit share a name, the later one wins.
"""

import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, TextIO

from jinja2 import (
    BaseLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
    nodes,
)

from inkpress.errors import StartupError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = "templates"
PAGES_DIR = "pages"
USER_DIR = "user"

BASE_FRAGMENT = "base"


class Namespace(Enum):
    """The three independent collections of compiled templates."""

    TEMPLATES = "templates"
    PAGES = "pages"
    USER_PAGES = "user_pages"


# Shared fragments, relative to the templates directory, in compile order.
SITE_SPINE: tuple[str, ...] = (
    "software-name.html",
    "software-url.html",
    "software-code-url.html",
    "software-community-url.html",
    "software-credit.html",
    "software-versioned.html",
    "include/footer.html",
    "base.html",
    "user/include/silenced.html",
)

# User pages are self-contained: no base document shell.
USER_SPINE: tuple[str, ...] = (
    "software-name.html",
    "software-url.html",
    "software-code-url.html",
    "software-community-url.html",
    "software-credit.html",
    "software-versioned.html",
    "user/include/header.html",
    "user/include/footer.html",
    "user/include/silenced.html",
    "user/include/nav.html",
)

# Optional fragment groups, in the order they are appended.
FRAGMENT_GROUPS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("post-listing", ("include/posts.html",)),
    ("federated", ("user/include/header.html",)),
    ("post-rendering", ("include/post-render.html",)),
    ("oauth", ("include/oauth.html",)),
)

# Page identifier -> category tags, per namespace.
PAGE_CATEGORIES: Mapping[Namespace, Mapping[str, frozenset[str]]] = {
    Namespace.TEMPLATES: {
        "collection": frozenset({"post-listing", "post-rendering"}),
        "collection-tags": frozenset({"post-listing", "post-rendering"}),
        "chorus-collection": frozenset({"post-listing", "federated", "post-rendering"}),
        "chorus-collection-post": frozenset({"federated", "post-rendering"}),
        "collection-post": frozenset({"post-rendering"}),
        "post": frozenset({"post-rendering"}),
        "read": frozenset({"post-listing"}),
    },
    Namespace.PAGES: {
        "login": frozenset({"oauth"}),
        "landing": frozenset({"oauth"}),
        "signup": frozenset({"oauth"}),
    },
    Namespace.USER_PAGES: {},
}


def fragment_name(path: Path | str) -> str:
    """Logical fragment name for a file: its name before the first dot."""
    return Path(path).name.split(".")[0]


def page_categories(namespace: Namespace, identifier: str) -> frozenset[str]:
    """Category tags for a page identifier (file extensions are ignored)."""
    return PAGE_CATEGORIES[namespace].get(fragment_name(identifier), frozenset())


def fragment_paths(
    namespace: Namespace,
    identifier: str,
    source: Path,
    templates_path: Path,
) -> list[Path]:
    """Assemble the ordered fragment list for one compiled unit.

    Args:
        namespace: Namespace the unit belongs to (selects spine and groups)
        identifier: Page identifier or key
        source: The page's own source file
        templates_path: The templates/ directory holding shared fragments

    Returns:
        Fragment files in compile order, page source first
    """
    spine = USER_SPINE if namespace is Namespace.USER_PAGES else SITE_SPINE
    files = [source]
    files.extend(templates_path / rel for rel in spine)

    tags = page_categories(namespace, identifier)
    for tag, fragments in FRAGMENT_GROUPS:
        if tag in tags:
            files.extend(templates_path / rel for rel in fragments)

    return files


class FragmentLoader(BaseLoader):
    """Jinja loader that serves exactly one unit's fragment files."""

    def __init__(self, files: Sequence[Path]) -> None:
        self.files: dict[str, Path] = {}
        for path in files:
            self.files[fragment_name(path)] = path

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str, Callable[[], bool]]:
        path = self.files.get(template)
        if path is None:
            raise TemplateNotFound(template)
        try:
            source = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise TemplateNotFound(template) from None
        # Compiled once at startup; never reloaded.
        return source, str(path), lambda: True

    def list_templates(self) -> list[str]:
        return sorted(self.files)


@dataclass(frozen=True)
class CompiledTemplate:
    """One parsed and linked unit, ready to execute.

    Attributes:
        key: Lookup key within its namespace
        root: Name of the fragment execution starts from
        fragments: Source files the unit was built from, in compile order
        environment: Jinja environment holding the compiled fragments
    """

    key: str
    root: str
    fragments: tuple[Path, ...]
    environment: Environment

    @property
    def template(self) -> Template:
        return self.environment.get_template(self.root)

    @property
    def fragment_names(self) -> list[str]:
        return self.environment.list_templates()

    def generate(self, data: Mapping[str, Any]) -> Iterator[str]:
        return self.template.generate(data)

    def stream(self, out: TextIO, data: Mapping[str, Any]) -> None:
        """Execute the unit, writing each chunk to out as it is produced."""
        for chunk in self.generate(data):
            out.write(chunk)


def build_template(
    namespace: Namespace,
    key: str,
    source: Path,
    templates_path: Path,
    functions: Mapping[str, Callable[..., Any]],
    debug: bool = False,
) -> CompiledTemplate:
    """Compile one unit from its fragment list.

    Every fragment is compiled and every fragment name it references is
    resolved now, so a syntax error or missing shared fragment stops startup
    instead of surfacing at first render.

    Args:
        namespace: Namespace the unit belongs to
        key: Lookup key for the unit
        source: The page's own source file
        templates_path: The templates/ directory holding shared fragments
        functions: Template function library
        debug: Log every fragment path

    Returns:
        CompiledTemplate

    Raises:
        StartupError: If any fragment is missing or fails to compile, or a
            page does not extend the base shell
    """
    files = fragment_paths(namespace, key, source, templates_path)
    if debug:
        for path in files:
            logger.info("  [%s] %s", key, path)

    loader = FragmentLoader(files)
    env = Environment(
        loader=loader,
        autoescape=True,
        undefined=StrictUndefined,
        auto_reload=False,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.globals.update(functions)

    parents: dict[str, str | None] = {}
    for name, path in loader.files.items():
        try:
            ast = env.parse(path.read_text(encoding="utf-8"), name, str(path))
            env.get_template(name)
        except TemplateSyntaxError as e:
            raise StartupError(
                f"Template {key!r}: {e.filename}:{e.lineno}: {e.message}",
                path=e.filename,
            ) from e
        except (OSError, UnicodeDecodeError) as e:
            raise StartupError(
                f"Template {key!r}: cannot read fragment {path}: {e}", path=path
            ) from e
        except TemplateError as e:
            raise StartupError(f"Template {key!r}: {e}", path=path) from e

        for candidates in _required_references(ast):
            if not any(ref in loader.files for ref in candidates):
                refs = " or ".join(repr(ref) for ref in candidates)
                raise StartupError(
                    f"Template {key!r}: {path} references unknown fragment {refs}",
                    path=path,
                )
        parents[name] = next(
            (
                node.template.value
                for node in ast.find_all(nodes.Extends)
                if isinstance(node.template, nodes.Const)
            ),
            None,
        )

    root = fragment_name(source)
    if namespace is Namespace.PAGES and BASE_FRAGMENT not in _ancestors(parents, root):
        raise StartupError(
            f"Page {key!r} must extend the {BASE_FRAGMENT!r} template ({source})",
            path=source,
        )

    return CompiledTemplate(
        key=key,
        root=root,
        fragments=tuple(files),
        environment=env,
    )


def _required_references(ast: nodes.Template) -> Iterator[tuple[str, ...]]:
    """Yield the candidate names of each static extends/include/import.

    A list include needs only one candidate to exist. Includes marked
    ``ignore missing`` and dynamic names are not checked.
    """
    for node in ast.find_all((nodes.Extends, nodes.Include, nodes.Import, nodes.FromImport)):
        if isinstance(node, nodes.Include) and node.ignore_missing:
            continue
        target = node.template
        if isinstance(target, nodes.Const):
            values = target.value if isinstance(target.value, (tuple, list)) else (target.value,)
        elif isinstance(target, (nodes.Tuple, nodes.List)) and all(
            isinstance(item, nodes.Const) for item in target.items
        ):
            values = tuple(item.value for item in target.items)
        else:
            continue
        if values and all(isinstance(v, str) for v in values):
            yield tuple(values)


def _ancestors(parents: Mapping[str, str | None], name: str) -> list[str]:
    """Templates the named template extends, nearest first."""
    chain: list[str] = []
    current = parents.get(name)
    while current is not None and current not in chain:
        chain.append(current)
        current = parents.get(current)
    return chain
