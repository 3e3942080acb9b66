import pytest
from pydantic import ValidationError

from config import COLOR_PALETTE, DETAIL_BACKEND_TEMPO, Settings


def test_settings_defaults():
    cfg = Settings(detail_backend="api")
    assert cfg.color_palette == COLOR_PALETTE
    assert len(cfg.color_palette) == 16
    assert cfg.unknown_operation == "Unknown"
    assert cfg.detail_retry_attempts >= 1


def test_settings_normalize_urls_and_backend():
    cfg = Settings(detail_backend=" Tempo ", tempo_url="http://tempo:3200///", api_url="http://api/")
    assert cfg.detail_backend == DETAIL_BACKEND_TEMPO
    assert cfg.tempo_url == "http://tempo:3200"
    assert cfg.api_url == "http://api"


def test_settings_reject_unknown_backend():
    with pytest.raises(ValidationError):
        Settings(detail_backend="jaeger")


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("SPANVIEW_DETAIL_BACKEND", "tempo")
    monkeypatch.setenv("SPANVIEW_PORT", "9000")
    monkeypatch.setenv("SPANVIEW_DETAIL_RETRY_ATTEMPTS", "5")
    cfg = Settings()
    assert cfg.detail_backend == "tempo"
    assert cfg.port == 9000
    assert cfg.detail_retry_attempts == 5
