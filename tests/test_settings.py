"""
test_settings.py
Tests for stored settings, account lifecycle and first run setup
"""
import pendulum
import pytest
from yaml import safe_load

from conftest import FakeBackend, PARTITION
from notesync import configuration
from notesync.errors import AuthenticationError, TemplateError
from notesync.initialize import initialize
from notesync.model.sync_type import SyncType
from notesync.repository.configuration import ConfigurationRepository
from notesync.service import account
from notesync.service.settings import prepare_settings
from notesync.time import EPOCH


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    monkeypatch.setattr(configuration, "CONFIG_PATH", config_dir)
    monkeypatch.setattr(configuration, "APP_CONFIG_PATH", config_dir / "config.yaml")
    return config_dir / "config.yaml"


class TestConfigurationRepository:
    def test_initialize_writes_defaults(self, config_path):
        initialize()

        stored = safe_load(config_path.read_text())
        assert stored["notes_folder"] == configuration.DEFAULT_NOTES_FOLDER
        assert stored["note_template"] == configuration.DEFAULT_NOTE_TEMPLATE

    def test_missing_settings_get_defaults(self, config_path):
        config_path.parent.mkdir()
        config_path.write_text("notes_folder: Inbox\n")

        config = ConfigurationRepository().get_config()

        assert config["notes_folder"] == "Inbox"
        assert config["sync_type"] == SyncType.ONE_WAY.value
        assert config["refetch_batch_size"] == configuration.DEFAULT_REFETCH_BATCH_SIZE

    def test_update_and_flush(self, config_path):
        initialize()
        repository = ConfigurationRepository()

        assert repository.flush() is False
        repository.update_config(sync_type="two-way", notes_filter=None)
        assert repository.flush() is True

        stored = safe_load(config_path.read_text())
        assert stored["sync_type"] == "two-way"
        assert stored["notes_filter"] == ""

    def test_unknown_setting(self, config_path):
        initialize()
        with pytest.raises(ValueError):
            ConfigurationRepository().update_config(colour="red")

    def test_get_config_is_a_copy(self, config_path):
        initialize()
        repository = ConfigurationRepository()

        repository.get_config()["notes_folder"] = "Changed"

        assert repository.get_config()["notes_folder"] == configuration.DEFAULT_NOTES_FOLDER

    def test_last_sync_time(self, config_path):
        initialize()
        repository = ConfigurationRepository()
        assert repository.get_last_sync_time() == EPOCH

        repository.set_last_sync_time(pendulum.datetime(2024, 3, 15, 12, tz="UTC"))
        repository.flush()

        assert ConfigurationRepository().get_last_sync_time() == pendulum.datetime(
            2024, 3, 15, 12, tz="UTC"
        )


class TestPrepareSettings:
    def test_unset_values_are_dropped(self):
        assert prepare_settings(notes_folder="Inbox", email=None) == {"notes_folder": "Inbox"}

    def test_two_way_resets_note_template(self):
        settings = prepare_settings(sync_type=SyncType.TWO_WAY)
        assert settings == {
            "sync_type": "two-way",
            "note_template": configuration.DEFAULT_NOTE_TEMPLATE,
        }

    def test_one_way_keeps_note_template(self):
        template = '---\nid: "${id}"\n---\n${content}'
        settings = prepare_settings(sync_type="one-way", note_template=template)
        assert settings["note_template"] == template

    def test_invalid_note_template(self):
        with pytest.raises(TemplateError, match="'id' field is required"):
            prepare_settings(note_template="${content}")

    def test_unknown_sync_type(self):
        with pytest.raises(ValueError):
            prepare_settings(sync_type="sideways")

    def test_blank_formats_fall_back_to_defaults(self):
        settings = prepare_settings(date_format=" ", title_template="")
        assert settings == {
            "date_format": configuration.DEFAULT_DATE_FORMAT,
            "title_template": configuration.DEFAULT_TITLE_TEMPLATE,
        }


class TestAccount:
    def test_validation_lists_every_problem(self):
        with pytest.raises(AuthenticationError, match="Validation errors: Invalid email, Invalid password"):
            account.validate_credentials("", "")
        with pytest.raises(AuthenticationError, match="^Validation errors: Invalid password$"):
            account.validate_credentials("me@example.com", "")

    @pytest.mark.asyncio
    async def test_login_returns_tenant_ids(self):
        settings = await account.login(FakeBackend(), " me@example.com ", "secret")

        assert settings == {
            "email": "me@example.com",
            "password": "secret",
            "supabase_id": PARTITION,
            "firebase_id": "firebase-1",
        }

    @pytest.mark.asyncio
    async def test_login_failure(self):
        with pytest.raises(AuthenticationError, match="Login failed"):
            await account.login(FakeBackend(), "me@example.com", "wrong")

    @pytest.mark.asyncio
    async def test_logout(self):
        backend = FakeBackend()

        keys = await account.logout(backend)

        assert backend.signed_out is True
        assert set(keys) == {"email", "password", "firebase_id", "supabase_id"}
