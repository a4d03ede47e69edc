"""Inkpress template loading and rendering.

Templates are composed from fragment files, compiled once at startup into
three namespaces, and rendered per request with a shared function library.
"""

from inkpress.templates.composer import CompiledTemplate, Namespace, build_template
from inkpress.templates.registry import TemplateRegistry, init_templates

__all__ = [
    "CompiledTemplate",
    "Namespace",
    "TemplateRegistry",
    "build_template",
    "init_templates",
]
