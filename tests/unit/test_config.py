import pytest

from crawlconsole.config import SettingsManager
from crawlconsole.exceptions import SettingsError
from crawlconsole.models import ConsoleSettings


def test_load_creates_default_settings(tmp_path):
    manager = SettingsManager(tmp_path / "console")

    settings = manager.load()

    assert settings.base_url == "http://localhost:8080/api"
    assert settings.fence_requests is False
    assert manager.settings_path.exists()


def test_settings_round_trip(tmp_path):
    manager = SettingsManager(tmp_path)
    manager.save(
        ConsoleSettings(base_url="https://crawlab.example/api", token="t", fence_requests=True)
    )

    loaded = manager.load()

    assert loaded.base_url == "https://crawlab.example/api"
    assert loaded.token == "t"
    assert loaded.fence_requests is True


def test_invalid_settings_raise(tmp_path):
    (tmp_path / "settings.yaml").write_text("timeout: -1\n", encoding="utf-8")

    with pytest.raises(SettingsError):
        SettingsManager(tmp_path).load()


def test_unparseable_yaml_raises(tmp_path):
    (tmp_path / "settings.yaml").write_text("base_url: [unclosed\n", encoding="utf-8")

    with pytest.raises(SettingsError):
        SettingsManager(tmp_path).load()


def test_default_settings_file_has_no_unused_keys(tmp_path):
    manager = SettingsManager(tmp_path)
    manager.load()

    written = manager.settings_path.read_text(encoding="utf-8")

    assert "config_dir" not in written
    assert "base_url:" in written
