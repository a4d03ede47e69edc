"""Inkpress - template composition and rendering for a blogging platform.

Inkpress discovers, composes and caches the HTML templates of a multi-section
site (site templates, standalone pages and per-user collection pages) and
renders them with a shared function library and localization support.

Startup sequence:
- unpack_templates: materialize the bundled assets on first run
- init_templates: compile every template, page and user page exactly once
- TemplateRegistry.render_page / render_user_page: per-request rendering
"""

__version__ = "0.1.0"
__author__ = "Inkpress Contributors"
