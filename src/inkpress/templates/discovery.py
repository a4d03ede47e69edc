"""Template source discovery and key derivation.

Walks the three source roots and yields (key, path) pairs:
- templates/: flat; key is the file name before its first "."
- pages/: nested; key is the bare file name at any depth
- templates/user/: key is the file name directly under user/, or
  "<parent>/<file>" for anything deeper

Hidden files (leading ".") are skipped. Entries are visited in lexical order,
parents before children.
"""

import os
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

from inkpress.errors import StartupError

# Depth (relative to the user root) beyond which the parent dir joins the key
USER_KEY_DEPTH = 1


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def require_dir(path: Path, label: str) -> None:
    """Fail with the absolute location when a source root is missing.

    Raises:
        StartupError: If path is not an existing directory
    """
    if not path.is_dir():
        raise StartupError(
            f"the directory for the '{label}/' templates does not exist, "
            f"should have been at {str(path.absolute())!r}",
            path=path,
        )


def template_key(name: str) -> str:
    """Key for a flat template file: its name up to the first dot."""
    return name.split(".")[0]


def user_page_key(relative: PurePosixPath | str) -> str:
    """Key for a file under the user root.

    Args:
        relative: File path relative to the user root

    Returns:
        "file.html" at depth 1, "parent/file.html" deeper
    """
    parts = PurePosixPath(relative).parts
    if len(parts) > USER_KEY_DEPTH:
        return f"{parts[-2]}/{parts[-1]}"
    return parts[-1]


def iter_template_files(templates_path: Path) -> Iterator[tuple[str, Path]]:
    """Yield (key, path) for each visible file directly in templates/.

    Raises:
        StartupError: If the directory cannot be read
    """
    try:
        entries = sorted(os.scandir(templates_path), key=lambda e: e.name)
    except OSError as e:
        raise StartupError(f"problem reading {templates_path}: {e}", path=templates_path) from e

    for entry in entries:
        if entry.is_dir() or _is_hidden(entry.name):
            continue
        yield template_key(entry.name), Path(entry.path)


def walk_files(root: Path) -> Iterator[Path]:
    """Yield every visible file under root, depth-first in lexical order.

    Raises:
        StartupError: If root or any directory below it cannot be read
    """

    def on_error(err: OSError) -> None:
        raise StartupError(
            f"problem loading template from {err.filename!r}: {err}",
            path=err.filename,
        ) from err

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for name in sorted(filenames):
            if not _is_hidden(name):
                yield Path(dirpath) / name


def iter_page_files(pages_path: Path) -> Iterator[tuple[str, Path]]:
    """Yield (key, path) for every page under pages/, keyed by file name.

    Files with the same name in different subdirectories share a key; callers
    see both and the last one visited wins.
    """
    for path in walk_files(pages_path):
        yield path.name, path


def iter_user_page_files(user_path: Path) -> Iterator[tuple[str, Path]]:
    """Yield (key, path) for every file under templates/user/."""
    for path in walk_files(user_path):
        relative = PurePosixPath(path.relative_to(user_path).as_posix())
        yield user_page_key(relative), path
