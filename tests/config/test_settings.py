"""Tests for DbmSettings, the unified settings with TOML source."""

from pathlib import Path

import click
import pytest

from dbmeta.config.settings import DbmSettings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DBMETA_CONFIG", "DBMETA_QUIET", "DBMETA_CONNECTION__URL", "DBMETA_BUILD__PORT"):
        monkeypatch.delenv(name, raising=False)


class TestDbmSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        settings = DbmSettings.from_cli(cwd=tmp_path)
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.verbose is False
        assert settings.connection.url is None
        assert settings.export.filename == "schema.sql"
        assert settings.build.page_size == 8192

    def test_frozen(self, tmp_path: Path) -> None:
        settings = DbmSettings.from_cli(cwd=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        (tmp_path / "dbmeta.toml").write_text(
            '[connection]\nurl = "sqlite:///app.db"\n[export]\nfilename = "meta.sql"\n'
        )
        settings = DbmSettings.from_cli(cwd=tmp_path)
        assert settings.connection.url == "sqlite:///app.db"
        assert settings.export.filename == "meta.sql"
        assert settings.config_path == (tmp_path / "dbmeta.toml").resolve()

    def test_sparse_override(self, tmp_path: Path) -> None:
        (tmp_path / "dbmeta.toml").write_text("[build]\nport = 3051\n")
        settings = DbmSettings.from_cli(cwd=tmp_path)
        assert settings.build.port == 3051
        assert settings.build.user == "SYSDBA"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[build]\nfilename = "custom.fdb"\n')
        settings = DbmSettings.from_cli(config_path=str(custom), cwd=tmp_path)
        assert settings.build.filename == "custom.fdb"
        assert settings.config_path == custom

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "dbmeta.toml").write_text("[build\nport = \n")
        with pytest.raises(click.ClickException, match="Invalid TOML"):
            DbmSettings.from_cli(cwd=tmp_path)


class TestPriority:
    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = DbmSettings.from_cli(
            cwd=tmp_path, json_output=True, quiet=True, verbose=True
        )
        assert settings.json_output is True
        assert settings.quiet is True
        assert settings.verbose is True

    def test_env_var_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DBMETA_QUIET", "true")
        assert DbmSettings.from_cli(cwd=tmp_path).quiet is True

    def test_nested_env_beats_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / "dbmeta.toml").write_text('[connection]\nurl = "sqlite:///toml.db"\n')
        monkeypatch.setenv("DBMETA_CONNECTION__URL", "sqlite:///env.db")
        settings = DbmSettings.from_cli(cwd=tmp_path)
        assert settings.connection.url == "sqlite:///env.db"


class TestDiscoveryStart:
    def test_walks_up_from_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        deep = tmp_path / "sub" / "deep"
        deep.mkdir(parents=True)
        (tmp_path / "dbmeta.toml").write_text("[build]\nport = 3052\n")
        monkeypatch.chdir(deep)
        settings = DbmSettings.from_cli()
        assert settings.config_path == (tmp_path / "dbmeta.toml").resolve()
        assert settings.build.port == 3052

    def test_no_toml_found(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert DbmSettings.from_cli().config_path is None

    def test_missing_explicit_config_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "dbmeta.toml").write_text("[build]\nport = 3052\n")
        settings = DbmSettings.from_cli(config_path=str(tmp_path / "absent.toml"), cwd=tmp_path)
        assert settings.config_path is None
        assert settings.build.port == 3050
