"""First-run asset materialization.

The package ships its default templates, pages and static files as package
data. On startup they are copied to the configured writable locations so
operators can customize them. Anything already on disk is left alone, so
unpacking is safe to run on every boot.
"""

import logging
import os
from dataclasses import dataclass
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path

from inkpress.config import InkpressConfig
from inkpress.errors import AssetUnpackError

logger = logging.getLogger(__name__)

DIR_MODE = 0o700
FILE_MODE = 0o600

# Bundled tree name -> attribute of ServerConfig giving its destination
ASSET_TREES: tuple[tuple[str, str], ...] = (
    ("templates", "templates_path"),
    ("pages", "pages_path"),
    ("static", "static_path"),
)


@dataclass
class UnpackResult:
    """Summary of one unpack run.

    Attributes:
        created: Destination paths created (directories and files)
        existing: Destination paths left untouched
    """

    created: list[Path]
    existing: list[Path]


def bundled_assets() -> Traversable:
    """Root of the asset bundle shipped inside the package."""
    return resources.files("inkpress").joinpath("assets")


def _exists(path: Path) -> bool:
    """True if something is already at path.

    A path below a regular file counts as existing: it cannot be created, and
    the file in the way is left alone like any other existing entry.
    """
    try:
        os.lstat(path)
    except FileNotFoundError:
        return False
    except NotADirectoryError:
        pass
    return True


def _open_new(path: str, flags: int) -> int:
    return os.open(path, flags, FILE_MODE)


def unpack_tree(source: Traversable, dest: Path, result: UnpackResult | None = None) -> UnpackResult:
    """Copy a read-only tree to dest, skipping paths that already exist.

    Directories are created before their contents are visited; children are
    visited in lexical order. Stops at the first failure.

    Args:
        source: Bundled directory to copy
        dest: Destination path for that directory
        result: Accumulator shared across recursive calls

    Returns:
        UnpackResult listing created and existing paths

    Raises:
        OSError: If a directory or file cannot be created or read
    """
    if result is None:
        result = UnpackResult(created=[], existing=[])

    if _exists(dest):
        logger.debug("leaving existing   %s", dest)
        result.existing.append(dest)
    elif source.is_dir():
        logger.info("creating directory %s", dest)
        dest.mkdir(mode=DIR_MODE, parents=True)
        result.created.append(dest)
    else:
        data = source.read_bytes()
        logger.info("creating file      %s", dest)
        with open(dest, "xb", opener=_open_new) as f:
            f.write(data)
        result.created.append(dest)

    if source.is_dir():
        for child in sorted(source.iterdir(), key=lambda c: c.name):
            unpack_tree(child, dest / child.name, result)

    return result


def unpack_templates(
    config: InkpressConfig | None = None,
    bundle: Traversable | None = None,
) -> UnpackResult:
    """Materialize the templates, pages and static trees.

    Each tree is unpacked independently; failures from all three are
    collected and raised together.

    Args:
        config: Supplies destination parent directories (default: cwd)
        bundle: Asset bundle root holding templates/, pages/ and static/

    Returns:
        Combined UnpackResult for all trees

    Raises:
        AssetUnpackError: If any tree failed to unpack
    """
    config = config or InkpressConfig()
    bundle = bundle or bundled_assets()

    result = UnpackResult(created=[], existing=[])
    errors: list[Exception] = []
    for tree, dest_attr in ASSET_TREES:
        dest: Path = getattr(config.server, dest_attr)
        try:
            unpack_tree(bundle.joinpath(tree), dest, result)
        except OSError as e:
            logger.error("Failed to unpack %s to %s: %s", tree, dest, e)
            errors.append(e)

    if errors:
        raise AssetUnpackError(errors)

    logger.info("Unpacked assets: %d created, %d existing", len(result.created), len(result.existing))
    return result
