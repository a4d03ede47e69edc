"""Unit tests for localization string tables."""

from pathlib import Path

import pytest

from inkpress.l10n import StringTables
from tests.fixtures import LOCALES_DIR


class TestStringTables:
    """Tests for in-memory tables."""

    def test_default_table_is_empty_code(self) -> None:
        tables = StringTables({"": {"Read": "Read"}})
        assert tables.strings("")["Read"] == "Read"

    def test_unknown_language_is_empty(self) -> None:
        tables = StringTables({"": {"Read": "Read"}})
        assert dict(tables.strings("xx")) == {}

    def test_region_falls_back_to_base_language(self) -> None:
        tables = StringTables({"pt": {"Read": "Ler"}})
        assert tables.strings("pt-BR")["Read"] == "Ler"
        assert tables.strings("pt_BR")["Read"] == "Ler"

    def test_tables_are_read_only(self) -> None:
        tables = StringTables({"": {"Read": "Read"}})
        with pytest.raises(TypeError):
            tables.strings("")["Read"] = "Changed"  # type: ignore[index]

    def test_languages_excludes_default(self) -> None:
        tables = StringTables({"": {}, "fr": {}, "de": {}})
        assert tables.languages == ["de", "fr"]


class TestFromDirectory:
    """Tests for YAML-backed tables."""

    def test_loads_fixture_tables(self) -> None:
        tables = StringTables.from_directory(LOCALES_DIR)

        assert tables.strings("de")["Log in"] == "Anmelden"
        assert tables.strings("de")["Publish"] == ""
        assert tables.strings("")["Publish"] == "Publish"

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            StringTables.from_directory(tmp_path / "missing")

    def test_non_mapping_table(self, tmp_path: Path) -> None:
        (tmp_path / "en.yaml").write_text("- just\n- a list\n")
        with pytest.raises(ValueError, match="must be a mapping"):
            StringTables.from_directory(tmp_path)

    def test_null_value_is_empty_string(self, tmp_path: Path) -> None:
        (tmp_path / "en.yaml").write_text('"Read":\n')
        tables = StringTables.from_directory(tmp_path)
        assert tables.strings("en")["Read"] == ""


class TestBundled:
    """Tests for tables shipped with the package."""

    def test_bundled_default_table(self) -> None:
        tables = StringTables.bundled()
        assert tables.strings("")["Log in"] == "Log in"
        assert "write.as" in tables.strings("")["Powered by"]

    def test_bundled_french(self) -> None:
        tables = StringTables.bundled()
        assert tables.strings("fr")["Log in"] == "Se connecter"
