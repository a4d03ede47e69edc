"""Test fixtures for Inkpress.

- locales: small string tables used by localization tests
- write_files / MINIMAL_SHARED_FRAGMENTS: build small template trees
"""

from pathlib import Path

# Path to fixtures directory
FIXTURES_DIR = Path(__file__).parent

LOCALES_DIR = FIXTURES_DIR / "locales"


def write_files(root: Path, files: dict[str, str]) -> Path:
    """Write a mapping of relative path -> content under root."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


# Smallest fragment set that satisfies both spines.
MINIMAL_SHARED_FRAGMENTS: dict[str, str] = {
    "templates/software-name.html": "Inkpress",
    "templates/software-url.html": "https://inkpress.org",
    "templates/software-code-url.html": "https://example.com/code",
    "templates/software-community-url.html": "https://example.com/forum",
    "templates/software-credit.html": "credit",
    "templates/software-versioned.html": '{% include "software-name" %}',
    "templates/include/footer.html": "<footer>{% include \"software-name\" %}</footer>",
    "templates/base.html": (
        "<html>{% include \"silenced\" %}<main>{% block content %}{% endblock %}</main>"
        "{% include \"footer\" %}</html>"
    ),
    "templates/include/posts.html": "{% for p in posts %}<li>{{ p }}</li>{% endfor %}",
    "templates/include/post-render.html": "{% macro render(post) %}{{ post }}{% endmacro %}",
    "templates/include/oauth.html": "<div class=\"oauth\"></div>",
    "templates/user/include/silenced.html": "",
    "templates/user/include/header.html": "<header></header>",
    "templates/user/include/footer.html": "<footer></footer>",
    "templates/user/include/nav.html": "<nav></nav>",
}
