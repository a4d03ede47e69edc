"""Exception types raised by Inkpress.

Three kinds of failure exist:
- StartupError: template initialization cannot complete (always fatal)
- AssetUnpackError: bundled assets could not be materialized
- RenderError: executing a compiled template against data failed
"""

from pathlib import Path


class InkpressError(Exception):
    """Base class for all Inkpress errors."""


class StartupError(InkpressError):
    """Raised when templates cannot be loaded or compiled at startup."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = path
        super().__init__(message)


class AssetUnpackError(InkpressError):
    """Raised when one or more asset trees failed to unpack.

    Failures from every tree are collected so they can be reported in one pass.
    """

    def __init__(self, errors: list[Exception]) -> None:
        self.errors = errors
        details = "; ".join(str(e) for e in errors)
        super().__init__(f"Failed to unpack {len(errors)} asset tree(s): {details}")


class RenderError(InkpressError):
    """Raised when a compiled template fails while executing."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        self.message = message
        super().__init__(f"Error rendering {key}: {message}")
