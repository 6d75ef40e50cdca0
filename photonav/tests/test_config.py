from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from photonav.app import config as app_config
from photonav.app.application import Application

ENV_NAMES = [
    "PHOTONAV_WS_HOST",
    "PHOTONAV_WS_PORT",
    "PHOTONAV_ASSET_BACKEND",
    "PHOTONAV_ASSET_BASE_URL",
    "PHOTONAV_ASSET_DIR",
    "PHOTONAV_MAX_STEPS",
    "PHOTONAV_PROBE_TIMEOUT",
    "PHOTONAV_PREFETCH",
    "PHOTONAV_MANIFEST",
    "PHOTONAV_LOG_LEVEL",
    "SUPABASE_URL",
    "SUPABASE_API_KEY",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(app_config, "_load_env", lambda: None)
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    config = app_config.load_config()

    assert config.websocket.port == 8765
    assert config.assets.backend == "http"
    assert config.assets.asset_root == "photos-navigation"
    assert config.assets.image_suffix == ".png"
    assert config.assets.max_probes == 50
    assert config.assets.prefetch_enabled
    assert config.lookup.base_url is None
    assert config.lookup.table == "etudiant"
    assert config.log_level == "INFO"


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PHOTONAV_WS_PORT", "9000")
    monkeypatch.setenv("PHOTONAV_ASSET_BACKEND", "Local")
    monkeypatch.setenv("PHOTONAV_ASSET_DIR", str(tmp_path))
    monkeypatch.setenv("PHOTONAV_MAX_STEPS", "12")
    monkeypatch.setenv("PHOTONAV_PROBE_TIMEOUT", "1.5")
    monkeypatch.setenv("PHOTONAV_PREFETCH", "no")
    monkeypatch.setenv("SUPABASE_URL", "https://db.example.test")
    monkeypatch.setenv("SUPABASE_API_KEY", "secret")
    monkeypatch.setenv("PHOTONAV_LOG_LEVEL", "debug")

    config = app_config.load_config()

    assert config.websocket.port == 9000
    assert config.assets.backend == "local"
    assert config.assets.root_dir == tmp_path
    assert config.assets.max_probes == 12
    assert config.assets.probe_timeout == pytest.approx(1.5)
    assert not config.assets.prefetch_enabled
    assert config.lookup.base_url == "https://db.example.test"
    assert config.lookup.api_key == "secret"
    assert config.log_level == "DEBUG"


def test_malformed_values_fall_back(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PHOTONAV_WS_PORT", "eighty")
    monkeypatch.setenv("PHOTONAV_MAX_STEPS", "-3")
    monkeypatch.setenv("PHOTONAV_PROBE_TIMEOUT", "soon")
    monkeypatch.setenv("PHOTONAV_LOG_LEVEL", "chatty")

    config = app_config.load_config()

    assert config.websocket.port == 8765
    assert config.assets.max_probes == 50
    assert config.assets.probe_timeout == pytest.approx(5.0)
    assert config.log_level == "INFO"


@pytest.mark.parametrize("value", ["51", "200"])
def test_step_ceiling_cannot_be_raised(monkeypatch: pytest.MonkeyPatch, make_source, value: str) -> None:
    monkeypatch.setenv("PHOTONAV_MAX_STEPS", value)

    config = app_config.load_config()
    assert config.assets.max_probes == 50

    async def scenario():
        deps = Application(config=config).create_dependencies()
        source = make_source(endless=True)
        deps.discoverer.source = source
        try:
            sequence = await deps.discoverer.discover("Hall")
        finally:
            for callback in deps.cleanup:
                await callback()
        return source, sequence

    source, sequence = asyncio.run(scenario())
    assert len(source.probed) == 50
    assert len(sequence) == 50
