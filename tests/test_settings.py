"""Test configuration, persisted state and sync scheduling"""

import json
import pytest
import yaml

from sound_companion.config.settings import Settings, get_settings, reload_settings
from sound_companion.config.state import StateStore
from sound_companion.exceptions import ConfigError
from sound_companion.sync.scheduler import SYNC_PERIOD, is_sync_due


@pytest.fixture(autouse=True)
def isolated_environment(temp_dir, monkeypatch):
    """Keep user config files and environment out of the tests"""
    monkeypatch.setenv("HOME", str(temp_dir))
    monkeypatch.chdir(temp_dir)
    for name in ("SOUND_COMPANION_CATALOG_URL", "SOUND_COMPANION_SOUNDS_DIR", "SOUND_COMPANION_GSI_TOKEN"):
        monkeypatch.delenv(name, raising=False)


def write_config(path, data):
    path.write_text(yaml.dump(data), encoding='utf-8')
    return str(path)


class TestSettings:
    """Test settings loading"""

    def test_defaults(self):
        settings = Settings()
        assert settings.sounds.directory == "sounds"
        assert settings.sounds.concurrency == 4
        assert settings.gsi.port == 12345
        assert settings.events.chances == {}
        assert settings.validate() == []

    def test_yaml_file(self, temp_dir):
        path = write_config(temp_dir / "custom.yaml", {
            'sounds': {'directory': 'my-sounds', 'concurrency': 8, 'unknown': 1},
            'events': {'chances': {'OnDeath': 1.0}, 'bindings': {'OnKill': ['ezclap']}},
            'mystery': {'a': 1},
        })

        settings = Settings(path)

        assert settings.sounds.directory == "my-sounds"
        assert settings.sounds.concurrency == 8
        assert not hasattr(settings.sounds, 'unknown')
        assert settings.events.chances == {'OnDeath': 1.0}
        assert settings.events.bindings == {'OnKill': ['ezclap']}

    def test_environment_overrides_file(self, temp_dir, monkeypatch):
        path = write_config(temp_dir / "custom.yaml", {'sounds': {'catalog_url': 'https://file.test/c.json'}})
        monkeypatch.setenv("SOUND_COMPANION_CATALOG_URL", "https://env.test/c.json")
        monkeypatch.setenv("SOUND_COMPANION_GSI_TOKEN", "secret")

        settings = Settings(path)

        assert settings.sounds.catalog_url == "https://env.test/c.json"
        assert settings.gsi.auth_token == "secret"

    def test_invalid_yaml_raises(self, temp_dir):
        path = temp_dir / "broken.yaml"
        path.write_text("sounds: [unclosed", encoding='utf-8')

        with pytest.raises(ConfigError):
            Settings(str(path))

    def test_non_mapping_root_raises(self, temp_dir):
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n", encoding='utf-8')

        with pytest.raises(ConfigError):
            Settings(str(path))

    def test_derived_paths(self, temp_dir):
        settings = Settings()
        settings.security.config_directory = str(temp_dir / "cfg")
        settings.sounds.sync_period_hours = 2

        assert settings.get_state_path() == temp_dir / "cfg" / "state.json"
        assert settings.get_sync_period_seconds() == 7200

    def test_validate_reports_errors(self):
        settings = Settings()
        settings.sounds.concurrency = 0
        settings.sounds.catalog_url = "ftp://sounds"
        settings.events.chances = {'OnDeath': 1.5}
        settings.gsi.port = 70000

        errors = settings.validate()

        assert len(errors) == 4
        assert any("OnDeath" in error for error in errors)

    def test_save_config_blanks_token(self, temp_dir):
        settings = Settings()
        settings.gsi.auth_token = "secret"
        settings.sounds.directory = "saved"

        target = settings.save_config(str(temp_dir / "out" / "config.yaml"))
        data = yaml.safe_load(target.read_text(encoding='utf-8'))

        assert data['sounds']['directory'] == "saved"
        assert data['gsi']['auth_token'] == ""
        assert settings.gsi.auth_token == "secret"

    def test_reload_settings_replaces_global(self, temp_dir):
        path = write_config(temp_dir / "custom.yaml", {'gsi': {'port': 4000}})

        settings = reload_settings(path)

        assert get_settings() is settings
        assert settings.gsi.port == 4000


class TestStateStore:
    """Test persisted last sync time"""

    def test_never_synced(self, temp_dir):
        assert StateStore(temp_dir / "state.json").get_last_sync() is None

    def test_round_trip(self, temp_dir):
        store = StateStore(temp_dir / "nested" / "state.json")
        stored = store.set_last_sync(1700000000)

        assert stored == 1700000000.0
        assert StateStore(temp_dir / "nested" / "state.json").get_last_sync() == 1700000000.0

    def test_preserves_other_keys(self, temp_dir):
        path = temp_dir / "state.json"
        path.write_text(json.dumps({'other': 'x'}), encoding='utf-8')

        StateStore(path).set_last_sync(5)

        assert json.loads(path.read_text(encoding='utf-8')) == {'other': 'x', 'last_sync': 5.0}

    def test_corrupt_file_reads_as_never(self, temp_dir):
        path = temp_dir / "state.json"
        path.write_text("{not json", encoding='utf-8')

        assert StateStore(path).get_last_sync() is None


class TestScheduler:
    """Test sync cadence"""

    def test_never_synced_is_due(self):
        assert is_sync_due(None)
        assert is_sync_due(0)

    def test_period_boundary(self):
        last = 1_000_000.0
        assert not is_sync_due(last, now=last + SYNC_PERIOD - 1)
        assert is_sync_due(last, now=last + SYNC_PERIOD)
        assert is_sync_due(last, now=last + SYNC_PERIOD + 1)

    def test_custom_period(self):
        assert is_sync_due(100.0, now=160.0, period=60)
        assert not is_sync_due(100.0, now=159.0, period=60)
