"""Shared pytest fixtures for Inkpress tests.

Fixtures are organized by category:
- Configuration fixtures: configs rooted in a temporary directory
- Site fixtures: the bundled assets unpacked to disk, and compiled registries
- Tree fixtures: a minimal hand-built site
"""

from pathlib import Path
from typing import Any

import pytest

from inkpress.config import InkpressConfig, ServerConfig
from inkpress.l10n import StringTables
from inkpress.templates import TemplateRegistry, init_templates
from inkpress.unpack import unpack_templates
from tests.fixtures import MINIMAL_SHARED_FRAGMENTS, write_files

# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def site_config(tmp_path: Path) -> InkpressConfig:
    """Config with all three trees rooted at tmp_path."""
    return InkpressConfig(
        server=ServerConfig(
            templates_parent_dir=str(tmp_path),
            pages_parent_dir=str(tmp_path),
            static_parent_dir=str(tmp_path),
        )
    )


@pytest.fixture
def string_tables() -> StringTables:
    """In-memory string tables with a default and a French table."""
    return StringTables({
        "": {
            "Log in": "Log in",
            "Sign up": "Sign up",
            "Read": "Read",
            "Log in with": "Log in with",
            "Powered by": "powered by write.as",
            "This account is currently silenced.": "This account is currently silenced.",
        },
        "fr": {
            "Log in": "Se connecter",
            "Sign up": "",
        },
    })


# =============================================================================
# Site Fixtures
# =============================================================================


@pytest.fixture
def unpacked_site(site_config: InkpressConfig) -> InkpressConfig:
    """Bundled assets materialized under tmp_path."""
    unpack_templates(site_config)
    return site_config


@pytest.fixture
def registry(unpacked_site: InkpressConfig, string_tables: StringTables) -> TemplateRegistry:
    """Registry compiled from the bundled assets."""
    return init_templates(unpacked_site, string_tables)


@pytest.fixture
def page_data() -> dict[str, Any]:
    """Data accepted by every bundled standalone page."""
    return {
        "lang": "en",
        "site_name": "Write Here",
        "oauth": ["gitlab", "slack"],
    }


@pytest.fixture
def collection_data() -> dict[str, Any]:
    """Data accepted by the bundled collection templates."""
    posts = [
        {
            "title": "Hello <world>",
            "content": "First post",
            "url": "/blog/hello",
            "created": "2024-01-02",
            "tags": ["intro"],
        },
        {
            "title": "Second",
            "content": "More words",
            "url": "/blog/second",
            "created": "2024-01-03",
        },
    ]
    return {
        "lang": "en",
        "collection": {"title": "My Blog", "alias": "blog", "total_posts": 1234},
        "posts": posts,
        "post": posts[0],
        "tag": "intro",
        "username": "matt",
    }


# =============================================================================
# Tree Fixtures
# =============================================================================


@pytest.fixture
def minimal_site(site_config: InkpressConfig, tmp_path: Path) -> InkpressConfig:
    """Hand-built site: shared fragments only, plus empty pages/ and user/ roots."""
    write_files(tmp_path, MINIMAL_SHARED_FRAGMENTS)
    (tmp_path / "pages").mkdir()
    return site_config
