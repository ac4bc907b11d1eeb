import pytest

from pokerpal.config import Config


class TestConfig:
    def test_plain_sqlite_url_gets_async_driver(self, monkeypatch):
        monkeypatch.setattr(Config, 'DATABASE_URL', 'sqlite:///pokerpal.db')
        assert Config.get_async_database_url() == 'sqlite+aiosqlite:///pokerpal.db'

    def test_async_url_left_alone(self, monkeypatch):
        monkeypatch.setattr(Config, 'DATABASE_URL', 'sqlite+aiosqlite:///other.db')
        assert Config.get_async_database_url() == 'sqlite+aiosqlite:///other.db'

    def test_cloud_storage_needs_every_credential(self, monkeypatch):
        monkeypatch.setattr(Config, 'USE_CLOUD_STORAGE', True)
        for name in ('R2_ACCOUNT_ID', 'R2_ACCESS_KEY_ID', 'R2_SECRET_ACCESS_KEY', 'R2_BUCKET_NAME'):
            monkeypatch.setattr(Config, name, 'set')
        assert Config.is_cloud_storage_enabled()

        monkeypatch.setattr(Config, 'R2_SECRET_ACCESS_KEY', None)
        assert not Config.is_cloud_storage_enabled()

    def test_generated_session_secret_is_stable(self, monkeypatch):
        monkeypatch.setattr(Config, 'SESSION_SECRET', '')
        secret = Config.get_session_secret()

        assert len(secret) == 64
        assert Config.get_session_secret() == secret

    def test_validate_rejects_bad_bcrypt_cost(self, monkeypatch):
        monkeypatch.setattr(Config, 'BCRYPT_ROUNDS', 2)
        with pytest.raises(ValueError):
            Config.validate()

    def test_validate_requires_credentials_for_cloud_uploads(self, monkeypatch):
        monkeypatch.setenv('USE_CLOUD_STORAGE', 'true')
        monkeypatch.setattr(Config, 'R2_BUCKET_NAME', None)
        with pytest.raises(ValueError):
            Config.validate()
