"""Localization string tables.

Templates look terms up per language through ``localstr`` / ``localhtml``.
The default table is addressed by the empty language code and is the
fallback for any term a language table lacks.

Tables are plain YAML mappings of term -> string, one file per language:

    locales/
        default.yaml
        fr.yaml
        de.yaml
"""

import logging
from collections.abc import Mapping
from importlib import resources
from pathlib import Path
from types import MappingProxyType

import yaml

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "default"

_EMPTY: Mapping[str, str] = MappingProxyType({})


class StringTables:
    """Read-only collection of per-language string tables.

    Usage:
        tables = StringTables.from_directory(Path("locales"))
        tables.strings("fr")["publish"]
    """

    def __init__(self, tables: Mapping[str, Mapping[str, str]]) -> None:
        """Initialize from an in-memory mapping.

        Args:
            tables: Language code -> term table; "" is the default table
        """
        self._tables: dict[str, Mapping[str, str]] = {
            lang: MappingProxyType(dict(table)) for lang, table in tables.items()
        }

    def strings(self, lang: str) -> Mapping[str, str]:
        """Return the table for a language code.

        Region subtags fall back to the base language ("pt-BR" -> "pt").
        Unknown languages get an empty table.
        """
        if lang in self._tables:
            return self._tables[lang]
        base = lang.replace("_", "-").split("-")[0]
        return self._tables.get(base, _EMPTY)

    @property
    def languages(self) -> list[str]:
        return sorted(lang for lang in self._tables if lang)

    @classmethod
    def from_directory(cls, directory: Path) -> "StringTables":
        """Load every <lang>.yaml table in a directory.

        Args:
            directory: Directory holding the YAML tables

        Returns:
            StringTables instance

        Raises:
            FileNotFoundError: If the directory does not exist
            ValueError: If a table is not a mapping of strings
        """
        if not directory.is_dir():
            raise FileNotFoundError(f"Locales directory not found: {directory}")

        tables: dict[str, Mapping[str, str]] = {}
        for path in sorted(directory.glob("*.yaml")):
            lang = "" if path.stem == DEFAULT_TABLE else path.stem
            tables[lang] = _parse_table(path.read_text(encoding="utf-8"), str(path))
            logger.debug("Loaded %d strings for %r from %s", len(tables[lang]), lang, path)

        return cls(tables)

    @classmethod
    def bundled(cls) -> "StringTables":
        """Load the tables shipped inside the inkpress package."""
        tables: dict[str, Mapping[str, str]] = {}
        for entry in sorted(resources.files("inkpress").joinpath("locales").iterdir(), key=lambda e: e.name):
            if not entry.name.endswith(".yaml"):
                continue
            stem = entry.name.removesuffix(".yaml")
            lang = "" if stem == DEFAULT_TABLE else stem
            tables[lang] = _parse_table(entry.read_text(encoding="utf-8"), entry.name)
        return cls(tables)


def _parse_table(text: str, source: str) -> dict[str, str]:
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"String table must be a mapping: {source}")
    return {str(term): "" if value is None else str(value) for term, value in data.items()}
