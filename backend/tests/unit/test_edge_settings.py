"""Unit tests for edge settings configuration."""

from pathlib import Path

from farmsync.config import Settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_defaults_match_the_farm_cache_layout():
    settings = Settings(_env_file=None)
    assert settings.cache_prefix == "adonai"
    assert settings.cache_version == "v1.0.0"
    assert settings.queue_max_retries == 3
    assert settings.image_max_age_seconds == 86400
    assert "/" in settings.precache_urls


def test_origin_url_trailing_slash_is_stripped():
    settings = Settings(_env_file=None, origin_url="https://farm.example.com/")
    assert settings.origin_url == "https://farm.example.com"


def test_non_positive_fetch_timeout_falls_back_to_default():
    settings = Settings(_env_file=None, fetch_timeout_seconds=0)
    assert settings.fetch_timeout_seconds == 10.0


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("CACHE_VERSION", "v2.0.0")
    monkeypatch.setenv("REPLAY_TO_ORIGIN", "true")
    settings = Settings(_env_file=None)
    assert settings.cache_version == "v2.0.0"
    assert settings.replay_to_origin is True
