import config
from config import Settings

def test_defaults(monkeypatch):
    for name in ["DATABASE_URL", "LOG_LEVEL", "SEED_ON_STARTUP", "PORT", "CORS_ORIGINS"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "dotenv_paths", [])
    settings = Settings.from_env()
    assert settings.DATABASE_URL == "sqlite:///catalog.db"
    assert settings.LOG_LEVEL == "INFO"
    assert settings.SEED_ON_STARTUP is True
    assert settings.PORT == 8000
    assert settings.cors_origins == "*"

def test_environment_overrides(monkeypatch):
    monkeypatch.setattr(config, "dotenv_paths", [])
    monkeypatch.setenv("DATABASE_URL", "postgresql://catalog@localhost/catalog")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("SEED_ON_STARTUP", "false")
    monkeypatch.setenv("PORT", "9000")
    monkeypatch.setenv("CORS_ORIGINS", "http://localhost:5173, http://example.com")
    settings = Settings.from_env()
    assert settings.DATABASE_URL == "postgresql://catalog@localhost/catalog"
    assert settings.LOG_LEVEL == "DEBUG"
    assert settings.SEED_ON_STARTUP is False
    assert settings.PORT == 9000
    assert settings.cors_origins == ["http://localhost:5173", "http://example.com"]

def test_dotenv_file_is_loaded(monkeypatch, tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=8123\n")
    # Registered first so the value loaded from the file is removed afterwards
    monkeypatch.setenv("PORT", "0")
    monkeypatch.delenv("PORT")
    monkeypatch.setattr(config, "dotenv_paths", [str(tmp_path / "missing.env"), str(env_file)])
    assert Settings.from_env().PORT == 8123
