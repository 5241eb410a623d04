"""Unit tests for configuration loading."""

from buildops.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        settings = Settings()

        assert settings.database_url == "sqlite:///./buildops.db"
        assert settings.database_echo is False
        assert settings.log_level == "INFO"
        assert settings.log_file == "logs/server.log"
        assert settings.log_max_bytes == 10 * 1024 * 1024
        assert settings.log_backup_count == 5
        assert settings.port == 8000

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("DATABASE_URL", "postgresql://buildops@db/buildops")
        monkeypatch.setenv("DATABASE_ECHO", "true")
        monkeypatch.setenv("CORS_ORIGINS", '["https://app.example"]')
        monkeypatch.setenv("LOG_BACKUP_COUNT", "2")

        settings = Settings()

        assert settings.database_url == "postgresql://buildops@db/buildops"
        assert settings.database_echo is True
        assert settings.cors_origins == ["https://app.example"]
        assert settings.log_backup_count == 2

    def test_reads_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("PORT", raising=False)
        (tmp_path / ".env").write_text("PORT=9100\nUNRELATED_SETTING=ignored\n")

        settings = Settings()

        assert settings.port == 9100
