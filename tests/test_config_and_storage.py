"""Tests for config loading and the file-backed key/value storage."""

import json

import pytest

from config_loader import (
    get_export_dir,
    get_min_input_chars,
    get_retention_months,
    get_site_url,
    get_storage_path,
    get_supabase_settings,
    get_usage_limits,
    load_config,
)
from local_storage import LocalStorage
from stores import SettingsStore


class TestLoadConfig:
    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.json"))

    def test_env_overrides_applied(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"supabase": {"url": "https://file.supabase.co"}}))
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
        monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_env")
        monkeypatch.delenv("SITE_URL", raising=False)

        config = load_config(str(path))

        assert config["supabase"]["url"] == "https://env.supabase.co"
        assert config["stripe"]["secret_key"] == "sk_env"
        assert "app" not in config

    def test_empty_env_value_ignored(self, tmp_path, monkeypatch):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"app": {"site_url": "https://file.example.com"}}))
        monkeypatch.setenv("SITE_URL", "")

        config = load_config(str(path))

        assert config["app"]["site_url"] == "https://file.example.com"


class TestAccessors:
    def test_supabase_settings(self, test_config):
        assert get_supabase_settings(test_config) == ("https://test.supabase.co", "anon-key")
        assert get_supabase_settings(test_config, service_role=True)[1] == "service-role-key"

    def test_supabase_missing_raises(self):
        with pytest.raises(ValueError, match="SUPABASE_SERVICE_ROLE_KEY"):
            get_supabase_settings({"supabase": {"url": "https://x"}}, service_role=True)

    def test_site_url_fallbacks(self):
        assert get_site_url({"app": {"site_url": "https://a.com/"}}) == "https://a.com"
        assert get_site_url({}, origin="https://origin.com") == "https://origin.com"
        assert get_site_url({}) == "http://localhost:3000"

    def test_paths(self, test_config, tmp_data_dir):
        assert get_storage_path(test_config) == tmp_data_dir / "local-storage.json"
        assert get_export_dir(test_config) == tmp_data_dir / "exports"

    def test_defaults(self):
        assert get_retention_months({}) == 3
        assert get_min_input_chars({}) == 50
        assert get_usage_limits({}) == {}


class TestLocalStorage:
    def test_get_missing(self, storage):
        assert storage.get_item("absent") is None
        assert storage.keys() == []

    def test_set_get_remove(self, storage):
        storage.set_item("a", "1")
        storage.set_item("b", 2)

        assert storage.get_item("a") == "1"
        assert storage.get_item("b") == "2"

        storage.remove_item("a")
        storage.remove_item("never-set")
        assert storage.keys() == ["b"]

    def test_persists_across_instances(self, storage):
        storage.set_json("prefs", {"theme": "dark"})

        reopened = LocalStorage(storage.path)

        assert reopened.get_json("prefs") == {"theme": "dark"}

    def test_unreadable_json_returns_none(self, storage):
        storage.set_item("broken", "{not json")
        assert storage.get_json("broken") is None

    def test_clear(self, storage):
        storage.set_item("a", "1")
        storage.clear()
        assert storage.keys() == []

    def test_corrupt_file_reads_as_empty(self, storage):
        storage.path.write_text('{"app-settings-storage": "{\\"state\\"')

        assert storage.get_item("app-settings-storage") is None
        assert storage.keys() == []

        storage.set_item("a", "1")
        assert json.loads(storage.path.read_text()) == {"a": "1"}

    def test_corrupt_file_does_not_break_stores(self, storage):
        storage.path.write_text("[1, 2")

        assert SettingsStore(storage).settings.mode.value == "detailed"
