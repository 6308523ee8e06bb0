from pathlib import Path

from socialnet.core.config import DEFAULT_SQLITE_URL, PROJECT_DIR, Settings


def make_settings(**overrides):
    values = {"JWT_SECRET_KEY": "test-secret-key", "DATABASE_URL": "sqlite+aiosqlite:///:memory:"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_relative_upload_dir_resolves_against_project_root():
    relative = make_settings(UPLOAD_DIR="uploads")
    default = Settings.model_fields["UPLOAD_DIR"].default

    assert relative.UPLOAD_DIR == default
    assert Path(relative.UPLOAD_DIR) == PROJECT_DIR / "uploads"


def test_absolute_upload_dir_is_kept(tmp_path):
    assert make_settings(UPLOAD_DIR=str(tmp_path)).UPLOAD_DIR == str(tmp_path)


def test_database_url_from_parts():
    settings = make_settings(
        DATABASE_URL=None,
        DB_USER="app",
        DB_PASSWORD="pw",
        DB_HOST="db",
        DB_NAME="social",
    )
    assert settings.SQLALCHEMY_DATABASE_URI == "mysql+asyncmy://app:pw@db:3306/social?charset=utf8mb4"


def test_database_url_falls_back_to_sqlite():
    settings = make_settings(DATABASE_URL=None, DB_USER=None, DB_HOST=None, DB_NAME=None)
    assert settings.SQLALCHEMY_DATABASE_URI == DEFAULT_SQLITE_URL
