"""Unit tests for sendtovault.config.SyncConfig."""

import textwrap
from pathlib import Path

import pytest

from sendtovault.config import DEFAULT_API_URL, SyncConfig
from sendtovault.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("SENDTOVAULT_API_URL", "SENDTOVAULT_VAULT_DIR", "SENDTOVAULT_STATE_PATH"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture()
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "sendtovault.toml"
    path.write_text(
        textwrap.dedent("""\
            [sendtovault]
            api_url   = "https://staging.example.com/v1/"
            vault_dir = "/srv/notes"
            min_delay = 30
            max_delay = 600
        """),
        encoding="utf-8",
    )
    return path


class TestDefaults:
    def test_defaults(self):
        cfg = SyncConfig()
        assert cfg.api_url == DEFAULT_API_URL
        assert cfg.inbox_folder == "Inbox"
        assert cfg.min_delay == 120
        assert cfg.max_delay == 1800

    def test_state_path_under_vault(self, tmp_path: Path):
        cfg = SyncConfig(vault_dir=tmp_path)
        assert cfg.state_path == tmp_path / ".sendtovault" / "state.yaml"


class TestLoad:
    def test_reads_toml(self, config_file: Path):
        cfg = SyncConfig.load(config_file)
        assert cfg.api_url == "https://staging.example.com/v1"
        assert cfg.vault_dir == Path("/srv/notes")
        assert cfg.min_delay == 30.0

    def test_env_overrides_file(self, config_file: Path, monkeypatch):
        monkeypatch.setenv("SENDTOVAULT_API_URL", "https://env.example.com")
        assert SyncConfig.load(config_file).api_url == "https://env.example.com"

    def test_kwargs_override_env(self, monkeypatch):
        monkeypatch.setenv("SENDTOVAULT_VAULT_DIR", "/from/env")
        assert SyncConfig.load(vault_dir="/from/kwargs").vault_dir == Path("/from/kwargs")

    def test_none_kwargs_ignored(self, monkeypatch):
        monkeypatch.setenv("SENDTOVAULT_VAULT_DIR", "/from/env")
        assert SyncConfig.load(vault_dir=None).vault_dir == Path("/from/env")

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            SyncConfig.load(tmp_path / "nope.toml")

    def test_bad_toml(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text("[sendtovault\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="invalid TOML"):
            SyncConfig.load(path)

    def test_unknown_key(self, tmp_path: Path):
        path = tmp_path / "extra.toml"
        path.write_text("[sendtovault]\npoll_every = 5\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="poll_every"):
            SyncConfig.load(path)


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_delay": 0},
            {"min_delay": 100, "max_delay": 50},
            {"timeout": -1},
            {"api_url": "ftp://nope"},
            {"inbox_folder": "/"},
            {"min_delay": "soon"},
        ],
    )
    def test_rejects_bad_values(self, kwargs):
        with pytest.raises(ConfigError):
            SyncConfig(**kwargs)
